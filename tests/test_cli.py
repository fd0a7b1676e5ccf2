"""Tests for the command line interface."""

from pathlib import Path

from quire.cli import InfoFilter, main


def write_site(site_dir, temp_dir):
    (site_dir / 'quire.yml').write_text(f"builtin: {Path(temp_dir) / 'none'}\n", encoding='utf-8')
    (site_dir / 'index.html').write_text('+++\ntitle = "Home"\n+++\n{{ page.title }}', encoding='utf-8')


class TestMain:
    """Test cases for main()."""

    def test_build(self, site_dir, temp_dir):
        """Test a successful build writing output."""
        write_site(site_dir, temp_dir)
        output_dir = Path(temp_dir) / 'out'
        assert main(['--config-dir', str(site_dir), '--output', str(output_dir)]) == 0
        assert (output_dir / 'index.html').read_text(encoding='utf-8') == 'Home'

    def test_no_output(self, site_dir, temp_dir):
        """Test loading without writing files."""
        write_site(site_dir, temp_dir)
        assert main(['--config-dir', str(site_dir), '--no-output']) == 0
        assert not (site_dir / '_site').exists()

    def test_errors_fail_the_build(self, site_dir, temp_dir, capsys):
        """Test that an error in any page gives a non-zero exit status."""
        write_site(site_dir, temp_dir)
        (site_dir / 'broken.html').write_text('{{ unclosed', encoding='utf-8')
        assert main(['--config-dir', str(site_dir), '--no-output']) == 1
        assert 'Build failed with 1 error(s)' in capsys.readouterr().err

    def test_invalid_config(self, site_dir):
        """Test that an unreadable configuration is reported."""
        (site_dir / 'quire.yml').write_text('themes: [unclosed\n', encoding='utf-8')
        assert main(['--config-dir', str(site_dir), '--no-output']) == 1

    def test_init(self, temp_dir):
        """Test creating a sample configuration."""
        assert main(['--config-dir', temp_dir, '--init', 'yml']) == 0
        assert (Path(temp_dir) / 'quire.yml').exists()


class TestInfoFilter:
    """Test cases for the console filter."""

    def _record(self, level, message):
        import logging
        return logging.LogRecord('Quire', level, __file__, 1, message, None, None)

    def test_filters_chatter(self):
        """Test that only selected info messages pass."""
        info_filter = InfoFilter()
        assert info_filter.filter(self._record(20, 'Site build completed in 1s'))
        assert not info_filter.filter(self._record(20, 'random chatter'))
        assert info_filter.filter(self._record(40, 'an error'))
