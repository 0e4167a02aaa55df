import re
from typing import Iterable, Optional, Tuple


def _char_class(ranges: Iterable[Tuple[int, int]]) -> "re.Pattern[str]":
    parts = [f"{chr(lo)}-{chr(hi)}" if lo != hi else chr(lo) for lo, hi in ranges]
    return re.compile("[" + "".join(parts) + "]")


# Control characters, NBSP and the Unicode space/general punctuation block.
_CONTROL_AND_SPACES = _char_class(
    [(0x00, 0x1F), (0x7F, 0xA0), (0x2000, 0x206F), (0x3000, 0x3000)]
)

# Private use area, pictographs and stray surrogates.
_SYMBOLS = _char_class(
    [
        (0xE000, 0xF8FF),
        (0x1F000, 0x1F7FF),
        (0x1F910, 0x1F95D),
        (0x2694, 0x2697),
        (0xD800, 0xDFFF),
    ]
)


def clean_value(value: Optional[str]) -> str:
    """Strip invisible and pictographic characters from a field value."""
    if not value:
        return ""
    value = _CONTROL_AND_SPACES.sub("", value)
    value = _SYMBOLS.sub("", value)
    return value.strip()
