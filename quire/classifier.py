"""
Sniffing of file lead bytes to tell templated pages from static files.
"""

import enum
from typing import Optional, Tuple

# Number of bytes inspected at the start of each file
SNIFF_SIZE = 16

UTF8_BOM = b'\xef\xbb\xbf'

# A file starting with one of these (after an optional BOM) may be templated
TEMPLATE_OPENERS = (b'{{', b'+++', b'---')


class Classification(enum.Enum):
    BINARY = 'binary'
    PLAIN_STATIC = 'plain_static'
    FRONT_MATTER_CANDIDATE = 'front_matter_candidate'

    @property
    def is_templated(self) -> bool:
        return self is Classification.FRONT_MATTER_CANDIDATE


def classify(lead: bytes, openers=TEMPLATE_OPENERS) -> Classification:
    """Classify a file from its first bytes. ``lead`` may be shorter than SNIFF_SIZE."""
    count = len(lead)
    start = len(UTF8_BOM) if lead.startswith(UTF8_BOM) else 0

    opener = next((o for o in openers if lead.startswith(o, start)), None)
    if opener is None:
        return Classification.PLAIN_STATIC

    # Binary files can start with an opener by accident
    for i in range(start + len(opener), count):
        if lead[i] == 0:
            return Classification.BINARY
    return Classification.FRONT_MATTER_CANDIDATE


def decode_text(data: bytes) -> str:
    """Decode file content, dropping a leading UTF-8 BOM."""
    if data.startswith(UTF8_BOM):
        data = data[len(UTF8_BOM):]
    return data.decode('utf-8')


def sniff_file(path: str, sniff_size: int = SNIFF_SIZE) -> Tuple[Classification, Optional[str]]:
    """
    Classify the file at ``path``.

    Returns the classification and, for templated candidates, the full text
    read from byte zero. The file handle is closed before returning.
    """
    with open(path, 'rb') as stream:
        lead = stream.read(sniff_size)
        stream.seek(0)
        classification = classify(lead)
        if not classification.is_templated:
            return classification, None
        return classification, decode_text(stream.read())
