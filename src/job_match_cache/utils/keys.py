"""Key encoding for composite Redis keys.

Keys are built by joining components with ``:``. Each component is
percent-encoded first, so a component can never contain the delimiter and
splitting on the last ``:`` always recovers the original value.
"""

import re
from urllib.parse import quote, unquote

_GLOB_SPECIAL = re.compile(r"([\\*?\[\]])")


def escape_component(value: str) -> str:
    """Percent-encode a key component (``:`` becomes ``%3A``)."""
    return quote(value, safe="")


def unescape_component(value: str) -> str:
    """Reverse ``escape_component``."""
    return unquote(value)


def escape_glob(pattern: str) -> str:
    """Escape Redis glob metacharacters so ``pattern`` matches literally."""
    return _GLOB_SPECIAL.sub(r"\\\1", pattern)
