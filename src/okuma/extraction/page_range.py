"""Page-range parsing for partial PDF extraction.

User-facing range strings are either ``all`` (or empty) or a hyphenated
pair of 0-indexed page numbers such as ``4-7``.  Resolved ranges are
1-indexed and inclusive.
"""

from __future__ import annotations

from dataclasses import dataclass
import re

from okuma.errors import InvalidPageRangeError

ALL_PAGES = "all"

_RANGE_RE = re.compile(r"^([0-9]+)-([0-9]+)$")


@dataclass(frozen=True, slots=True)
class PageRange:
    start: int
    end: int

    @property
    def size(self) -> int:
        return self.end - self.start + 1

    def pages(self) -> range:
        return range(self.start, self.end + 1)


def resolve_page_range(spec: str | None, total_pages: int) -> PageRange | None:
    """Return the 1-indexed range for *spec*, or ``None`` when it is invalid."""

    value = (spec or "").strip()
    if not value or value == ALL_PAGES:
        candidate = PageRange(start=1, end=total_pages)
    else:
        match = _RANGE_RE.match(value)
        if match is None:
            return None
        first, last = int(match.group(1)), int(match.group(2))
        candidate = PageRange(start=first + 1, end=min(last + 1, total_pages))

    if candidate.start > total_pages or candidate.start > candidate.end:
        return None
    return candidate


def require_page_range(spec: str | None, total_pages: int) -> PageRange:
    """Like :func:`resolve_page_range` but raise on invalid input."""

    resolved = resolve_page_range(spec, total_pages)
    if resolved is None:
        raise InvalidPageRangeError(spec=spec or "", total_pages=total_pages)
    return resolved
