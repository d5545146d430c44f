# tests/test_parser.py
"""Test LRC parsing"""

import pytest

from lyricsync.lyrics.parser import parse_lrc, has_timestamps, format_lrc_timestamp
from conftest import SAMPLE_LRC


class TestParseLrc:
    """Test parse_lrc"""

    def test_sample_document(self):
        """Test the bilingual sample parses to three lines with one translation"""
        document = parse_lrc(SAMPLE_LRC)

        assert len(document) == 3
        assert [line.text for line in document] == ["Hello", "Hola", "World"]
        assert [line.timestamp for line in document] == [1.0, 1.0, 5.0]
        assert [line.is_translation for line in document] == [False, True, False]
        assert not any(line.is_active for line in document)

    def test_output_sorted_with_sequence_indexes(self):
        """Test lines are reordered by time and renumbered"""
        document = parse_lrc("[00:10.00]c\n[00:02.00]a\n[00:05.00]b")

        assert [line.text for line in document] == ["a", "b", "c"]
        assert [line.sequence_index for line in document] == [0, 1, 2]

    def test_ties_keep_input_order(self):
        """Test equal timestamps keep their input order"""
        document = parse_lrc("[00:03.00]first\n[00:01.00]early\n[00:03.00]second")

        assert [line.text for line in document] == ["early", "first", "second"]
        assert document[2].is_translation

    def test_multiple_timestamps_expand(self):
        """Test one line with several timestamps becomes several lines"""
        document = parse_lrc("[00:12.00][01:30.50]Chorus\n[00:20.00]Verse")

        assert [(line.timestamp, line.text) for line in document] == [
            (12.0, "Chorus"), (20.0, "Verse"), (90.5, "Chorus")
        ]

    def test_tags_and_untimed_lines_ignored(self):
        """Test ID tags and plain text produce no lines"""
        text = "[ar:Artist]\n[ti:Title]\n[offset:+200]\nplain text\n\n[00:01.00]Real"
        document = parse_lrc(text)

        assert [line.text for line in document] == ["Real"]

    @pytest.mark.parametrize("stamp, expected", [
        ("[00:07]", 7.0),
        ("[00:01.5]", 1.5),
        ("[00:01.05]", 1.05),
        ("[00:01.005]", 1.005),
        ("[01:02:50]", 62.5),
        ("[12:00.00]", 720.0),
    ])
    def test_timestamp_formats(self, stamp, expected):
        """Test accepted timestamp forms and their fractional precision"""
        document = parse_lrc(f"{stamp}line")

        assert len(document) == 1
        assert document[0].timestamp == pytest.approx(expected)

    def test_malformed_lines_skipped(self):
        """Test bad seconds and empty text are skipped without failing"""
        text = "[00:75.00]bad seconds\n[00:02.00]   \n[00:03.00]good\n[xx:yy]junk"
        document = parse_lrc(text)

        assert [line.text for line in document] == ["good"]

    @pytest.mark.parametrize("text", [None, "", "\n\n", "no timestamps at all", "[ar:Only tags]"])
    def test_unusable_input_gives_empty_document(self, text):
        """Test empty or unparsable input yields a zero-length document"""
        document = parse_lrc(text)

        assert document.is_empty
        assert len(document) == 0

    def test_translation_tolerance(self):
        """Test near-identical timestamps count as translations"""
        text = "[00:01.00]Line\n[00:01.03]Linea\n[00:01.20]Next"

        document = parse_lrc(text)
        assert [line.is_translation for line in document] == [False, True, False]

        strict = parse_lrc(text, translation_tolerance=0.0)
        assert [line.is_translation for line in strict] == [False, False, False]

    def test_translation_measured_from_primary(self):
        """Test a chain of close lines is measured against the primary line"""
        document = parse_lrc("[00:01.00]a\n[00:01.04]b\n[00:01.08]c")

        assert [line.is_translation for line in document] == [False, True, False]

    @pytest.mark.parametrize("text", [
        SAMPLE_LRC,
        "[00:30.00]z\n[00:10.00][00:50.00]y\n[00:20.00]x",
        "[03:00.00]late\n[00:00.00]start\n[01:00.00]middle\n[01:00.00]middle again",
    ])
    def test_ordering_invariant(self, text):
        """Test timestamps are non-decreasing and indexes run 0..N-1"""
        document = parse_lrc(text)
        timestamps = [line.timestamp for line in document]

        assert timestamps == sorted(timestamps)
        assert [line.sequence_index for line in document] == list(range(len(document)))


class TestParserHelpers:
    """Test parser helper functions"""

    def test_has_timestamps(self):
        assert has_timestamps(SAMPLE_LRC)
        assert has_timestamps("[ar:x]\n  [00:01]x")
        assert not has_timestamps("[ar:Artist]\nplain")
        assert not has_timestamps("")
        assert not has_timestamps(None)

    def test_format_lrc_timestamp(self):
        assert format_lrc_timestamp(0) == "00:00.00"
        assert format_lrc_timestamp(62.5) == "01:02.50"
        assert format_lrc_timestamp(605.25) == "10:05.25"
        assert format_lrc_timestamp(-3) == "00:00.00"
