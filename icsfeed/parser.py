import re
from typing import Dict, Iterator, List, Optional, Tuple

from .cleaner import clean_value

Record = Dict[str, str]

RECORD_MARKER = "BEGIN:VEVENT"
TERMINAL_MARKERS = ("END:VEVENT", "END:VCALENDAR")
LINK_FIELD = "URL"

_LINE_BREAK = re.compile(r"\r?\n")


def unfold_lines(block: str) -> Iterator[str]:
    """Join folded continuation lines back into logical lines.

    A physical line starting with a space continues the previous logical
    line. The leading space is kept as the joining character, so
    ``"SUMMARY:Hello\\n World"`` unfolds to ``"SUMMARY:Hello World"``.
    """
    current = ""
    for line in _LINE_BREAK.split(block):
        if line.startswith(" "):
            current += line.rstrip()
            continue
        if current:
            yield current
        current = line
    if current:
        yield current


def split_field(line: str) -> Optional[Tuple[str, str]]:
    line = line.strip()
    colon = line.find(":")
    if colon == -1:
        return None
    key = line[:colon].split(";", 1)[0].strip()
    value = line[colon + 1:].strip()
    if not key or not value:
        return None
    return key, value


def parse_record(block: str) -> Record:
    record: Record = {}
    for line in unfold_lines(block):
        line = line.strip()
        if line.startswith(TERMINAL_MARKERS):
            continue
        field = split_field(line)
        if field is None:
            continue
        key, value = field
        if key == LINK_FIELD:
            value = clean_value(value)
            if not value:
                continue
        record[key] = value
    return record


def parse_records(text: str) -> List[Record]:
    """Split a calendar document into one record per event block."""
    blocks = text.split(RECORD_MARKER)[1:]
    return [parse_record(block) for block in blocks]
