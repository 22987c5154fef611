import re
from datetime import datetime
from typing import Any, Iterable, Sequence

_WHITESPACE = re.compile(r"\s+")
_SPACE_BEFORE_SYMBOL = re.compile(r" (?=[^0-9A-Za-z])")
_SPACE_AFTER_SYMBOL = re.compile(r"(?<=[^0-9A-Za-z \\]) ")


def lookup_path(data: Any, path: Sequence[str]) -> Any:
    """Walk nested dicts along ``path``; None as soon as a step is missing."""
    current = data
    for key in path:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def first_present(data: Any, paths: Iterable[Sequence[str]]) -> str | None:
    """Return the first string found at any of ``paths``, in order."""
    for path in paths:
        value = lookup_path(data, path)
        if isinstance(value, str):
            return value
    return None


def strip_data_url(image: str) -> str:
    """Drop a ``data:<mime>;base64,`` prefix, keeping only the payload."""
    return image.rsplit(",", 1)[-1]


def normalize_whitespace(text: str) -> str:
    """Canonical form used to compare two transcriptions of one formula.

    Whitespace runs collapse to a single space, and spaces next to a
    symbol are dropped, so ``x^2 +  1`` and ``x^2+1`` compare equal while
    ``\\alpha b`` and ``\\alphab`` do not.
    """
    collapsed = _WHITESPACE.sub(" ", text.strip())
    collapsed = _SPACE_BEFORE_SYMBOL.sub("", collapsed)
    return _SPACE_AFTER_SYMBOL.sub("", collapsed)


def local_today() -> str:
    return datetime.now().strftime("%Y-%m-%d")
