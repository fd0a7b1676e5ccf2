#!/usr/bin/env python3
"""
Command-line interface for Quire.
"""

import argparse
import logging
import os
import sys
import time
from datetime import datetime

from . import __version__
from .settings import QuireSettings
from .site import SiteObject


class InfoFilter(logging.Filter):
    """Filter to allow only selected INFO messages to be shown in the console."""
    def filter(self, record):
        if record.levelno >= logging.WARNING:
            return True
        allowed_messages = [
            "Loaded ",
            "Site build completed in",
            "Total pages generated:",
            "Total static files copied:",
        ]
        return any(msg in record.getMessage() for msg in allowed_messages)


def setup_logging(verbose: bool = False, log_dir: str = None) -> logging.Logger:
    """Set up logging configuration."""
    logger = logging.getLogger('Quire')
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    if not logger.handlers:
        # Console handler with filter
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        if not verbose:
            console_handler.addFilter(InfoFilter())
        console_handler.setFormatter(logging.Formatter('%(message)s'))
        logger.addHandler(console_handler)

        # File handler for all logs
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
            log_filename = datetime.now().strftime('quire_%Y-%m-%d_%H-%M-%S.log')
            file_handler = logging.FileHandler(os.path.join(log_dir, log_filename))
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
            logger.addHandler(file_handler)

    return logger


def main(argv=None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(description='Quire - content loader and page evaluator')
    parser.add_argument('--config-dir', type=str, default=None,
                        help='Site directory holding quire.yml (defaults to the current directory)')
    parser.add_argument('--output', type=str,
                        help='Output directory for generated files')
    parser.add_argument('--theme', dest='themes', action='append',
                        help='Theme directory, may be repeated, highest priority first')
    parser.add_argument('--verbose', action='store_true',
                        help='Show debug messages')
    parser.add_argument('--log-dir', type=str,
                        help='Also write a full log file into this directory')
    parser.add_argument('--no-output', action='store_true',
                        help='Load and evaluate only, do not write files')
    parser.add_argument('--init', type=str, choices=['yml', 'yaml', 'json'],
                        help='Create a sample configuration file')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    args = parser.parse_args(argv)

    if args.init:
        config_path = QuireSettings(args.config_dir).create_sample_config(args.init)
        print(f"Created sample configuration file: {config_path}")
        return 0

    logger = setup_logging(args.verbose, args.log_dir)
    overall_start_time = time.time()

    try:
        settings_loader = QuireSettings(args.config_dir)
        settings_loader.load_settings()
        args_dict = {k: v for k, v in vars(args).items() if v is not None}
        site = SiteObject(args.config_dir, settings=settings_loader.merge_with_args(args_dict))

        site.initialize()
        site.load()

        pages_written, files_copied = 0, 0
        if not args.no_output:
            pages_written, files_copied = site.generate(args.output)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    total_time = time.time() - overall_start_time
    logger.info(f"Site build completed in {total_time:.6f} seconds.")
    logger.info(f"Total pages generated: {pages_written}")
    logger.info(f"Total static files copied: {files_copied}")
    for stat in site.statistics.slowest():
        logger.debug(f"{stat.path}: load {stat.loading_parsing_time:.4f}s, "
                     f"evaluate {stat.evaluate_time:.4f}s, summary {stat.summary_time:.4f}s")

    if site.has_errors:
        print(f"Build failed with {len(site.diagnostics.errors())} error(s)", file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
