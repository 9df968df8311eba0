"""Tests for segmenter module."""

import pytest

from voxe.models import Unit
from voxe.segmenter import normalize, segment


def test_three_sentences():
    """Terminators followed by whitespace split sentences."""
    units = segment("Hello world. This is a test! Is it working?")
    assert [u.text for u in units] == ["Hello world.", "This is a test!", "Is it working?"]


def test_offsets_point_into_normalized_text():
    """Each unit's offsets slice its text out of the normalized input."""
    text = "  Hello   world.\n\nThis is\ta test!  Is it working?  "
    normalized = normalize(text)
    for unit in segment(text):
        assert normalized[unit.start_offset:unit.end_offset] == unit.text


def test_first_unit_offsets():
    """Offsets are half-open and exclude the separating space."""
    units = segment("Hello world. Bye.")
    assert units[0] == Unit(text="Hello world.", start_offset=0, end_offset=12)
    assert units[1] == Unit(text="Bye.", start_offset=13, end_offset=17)


def test_line_fallback():
    """No terminators + several lines gives one unit per line."""
    units = segment("Line one\nLine two\nLine three")
    assert [u.text for u in units] == ["Line one", "Line two", "Line three"]
    assert units[1].start_offset == 9


def test_line_fallback_repeated_lines():
    """Repeated lines map to successive occurrences."""
    units = segment("Chorus\nChorus\n\n\nChorus")
    assert [u.start_offset for u in units] == [0, 7, 14]


def test_single_line_no_punctuation():
    """One line without terminators is a single unit."""
    units = segment("  no punctuation single line  ")
    assert len(units) == 1
    assert units[0].text == "no punctuation single line"
    assert units[0].start_offset == 0
    assert units[0].end_offset == len("no punctuation single line")


def test_terminator_without_following_space():
    """A final terminator with nothing after it stays in one unit."""
    units = segment("Just one sentence.")
    assert [u.text for u in units] == ["Just one sentence."]


def test_terminator_groups():
    """Runs of terminators stay with their sentence."""
    units = segment("Really?! Yes... Fine.")
    assert [u.text for u in units] == ["Really?!", "Yes...", "Fine."]


def test_abbreviations_not_special_cased():
    """Any period followed by whitespace ends a unit."""
    units = segment("Mr. Smith paid 3. 50 dollars.")
    assert [u.text for u in units] == ["Mr.", "Smith paid 3.", "50 dollars."]


def test_decimal_without_space_kept():
    """A period inside a number is not a boundary."""
    units = segment("It cost 3.50 dollars. Cheap.")
    assert units[0].text == "It cost 3.50 dollars."


def test_trailing_residual_unit():
    """Text after the last terminator becomes the final unit."""
    units = segment("First. Then the rest without end")
    assert units[-1].text == "Then the rest without end"
    assert units[-1].end_offset == len("First. Then the rest without end")


@pytest.mark.parametrize("text", ["", "   ", "\n\t\n"])
def test_empty_input(text):
    """Blank input produces no units."""
    assert segment(text) == []


@pytest.mark.parametrize("text", [
    "Hello world. This is a test! Is it working?",
    "a. b. c.",
    "Line one\nLine two",
    "  spaced   out ?  text !  ",
    "...",
    "?! ?!",
])
def test_units_ordered_and_non_empty(text):
    """Units come in ascending, non-overlapping order with non-empty text."""
    units = segment(text)
    previous_end = 0
    for unit in units:
        assert unit.text.strip()
        assert unit.start_offset >= previous_end
        assert unit.end_offset > unit.start_offset
        previous_end = unit.end_offset


@pytest.mark.parametrize("text", [
    "Hello world. This is a test! Is it working?",
    "One.   Two!\n\nThree?",
    "tail with no end. more",
])
def test_rejoin_reproduces_normalized(text):
    """Joining unit texts with spaces gives back the normalized input."""
    assert " ".join(u.text for u in segment(text)) == normalize(text)


def test_normalize_idempotent():
    """Normalizing twice changes nothing."""
    text = "  a \n\n b\t c  "
    assert normalize(normalize(text)) == normalize(text) == "a b c"


def test_deterministic():
    """Same input gives equal output."""
    text = "One. Two! Three?"
    assert segment(text) == segment(text)
