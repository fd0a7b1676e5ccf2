"""Tests for lead byte classification."""

import pytest

from quire.classifier import (
    Classification, SNIFF_SIZE, UTF8_BOM, classify, decode_text, sniff_file,
)


class TestClassify:
    """Test cases for classify()."""

    @pytest.mark.parametrize('lead', [b'', b'{', b'+', b'-', b'\xef', b'\xef\xbb', UTF8_BOM, UTF8_BOM + b'{'])
    def test_short_buffers_are_plain_static(self, lead):
        """Test that buffers shorter than an opener never match."""
        assert classify(lead) is Classification.PLAIN_STATIC

    def test_opener_only(self):
        """Test that an opener with nothing after it is a candidate."""
        assert classify(b'{{') is Classification.FRONT_MATTER_CANDIDATE

    def test_plain_text(self):
        """Test that ordinary text is static."""
        assert classify(b'<html><body>') is Classification.PLAIN_STATIC

    @pytest.mark.parametrize('opener', [b'{{', b'+++', b'---'])
    def test_bom_then_opener(self, opener):
        """Test that a BOM is skipped before looking for an opener."""
        lead = (UTF8_BOM + opener + b' title = 1 ')[:SNIFF_SIZE]
        assert classify(lead) is Classification.FRONT_MATTER_CANDIDATE

    def test_bom_then_opener_with_zero_byte(self):
        """Test that a zero byte inside the window marks the file binary."""
        lead = UTF8_BOM + b'{{ab\x00cdef'
        assert len(lead) < SNIFF_SIZE
        assert classify(lead) is Classification.BINARY
        assert not classify(lead).is_templated

    def test_zero_byte_without_opener(self):
        """Test that binary data without an opener is plain static."""
        assert classify(b'\x89PNG\r\n\x1a\n\x00\x00') is Classification.PLAIN_STATIC

    def test_opener_not_at_start(self):
        """Test that an opener later in the buffer does not count."""
        assert classify(b' {{ x }}') is Classification.PLAIN_STATIC


class TestSniffFile:
    """Test cases for sniff_file()."""

    def test_empty_file(self, tmp_path):
        """Test that a zero length file is static."""
        path = tmp_path / 'empty.html'
        path.write_bytes(b'')
        assert sniff_file(str(path)) == (Classification.PLAIN_STATIC, None)

    def test_templated_file_reads_from_start(self, tmp_path):
        """Test that the whole text is read back from byte zero."""
        text = '{{ "x" }}' + 'y' * 100
        path = tmp_path / 'page.html'
        path.write_text(text, encoding='utf-8')
        classification, content = sniff_file(str(path))
        assert classification is Classification.FRONT_MATTER_CANDIDATE
        assert content == text

    def test_bom_is_dropped_from_text(self, tmp_path):
        """Test that the BOM does not end up in the page text."""
        path = tmp_path / 'bom.html'
        path.write_bytes(UTF8_BOM + b'+++\n+++\nbody')
        classification, content = sniff_file(str(path))
        assert classification is Classification.FRONT_MATTER_CANDIDATE
        assert content == '+++\n+++\nbody'

    def test_binary_file(self, tmp_path):
        """Test that binary content starting with an opener is not read as text."""
        path = tmp_path / 'data.bin'
        path.write_bytes(b'{{\x00\xff\xfe' * 10)
        assert sniff_file(str(path)) == (Classification.BINARY, None)

    def test_decode_text(self):
        """Test BOM removal when decoding."""
        assert decode_text(UTF8_BOM + b'abc') == 'abc'
        assert decode_text(b'abc') == 'abc'
