"""Split narration text into sentence units with offsets."""

import re

from voxe.models import Unit

# One or more terminators immediately followed by whitespace
_TERMINATOR_RE = re.compile(r"([.!?]+)\s+")

_WHITESPACE_RE = re.compile(r"\s+")
_LINE_BREAKS_RE = re.compile(r"[\r\n]+")


def normalize(text: str) -> str:
    """Collapse whitespace runs to a single space and trim."""
    return _WHITESPACE_RE.sub(" ", text).strip()


def _split_lines(raw: str, normalized: str) -> list[Unit]:
    """One unit per non-empty line, located in the normalized text.

    Each line is searched for from the end of the previous unit so repeated
    lines map to successive occurrences.
    """
    lines = [normalize(line) for line in _LINE_BREAKS_RE.split(raw)]
    lines = [line for line in lines if line]
    if len(lines) <= 1:
        return []

    units = []
    cursor = 0
    for line in lines:
        start = normalized.find(line, cursor)
        if start == -1:
            continue
        end = start + len(line)
        units.append(Unit(text=line, start_offset=start, end_offset=end))
        cursor = end
    return units


def segment(text: str) -> list[Unit]:
    """Segment text into sentence units.

    Sentences end at any run of ``.``, ``!`` or ``?`` followed by whitespace.
    Abbreviations and decimals are not special-cased. Offsets refer to the
    normalized text. Text without terminators falls back to one unit per line,
    or a single unit when there is only one line.
    """
    normalized = normalize(text)
    if not normalized:
        return []

    units = []
    last = 0
    matched = False
    for match in _TERMINATOR_RE.finditer(normalized):
        matched = True
        end = match.end(1)
        sentence = normalized[last:end].strip()
        if sentence:
            units.append(Unit(text=sentence, start_offset=last, end_offset=end))
        last = match.end()

    if last < len(normalized):
        remaining = normalized[last:].strip()
        if remaining:
            units.append(Unit(text=remaining, start_offset=last, end_offset=len(normalized)))

    if matched:
        return units

    # No terminators: fall back to lines of the raw input
    line_units = _split_lines(text, normalized)
    if line_units:
        return line_units
    return [Unit(text=normalized, start_offset=0, end_offset=len(normalized))]
