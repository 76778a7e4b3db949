"""Bookmark allocation for body and table-of-contents cross references.

Every section heading in the report body carries an anchor, and its table of
contents entry carries a matching anchor; the two link to each other. Codes
are derived from ``(context_id, title)`` so the same section always gets the
same code, and the context id (usually a connector GUID) keeps equally named
sections of different connectors apart.
"""

import hashlib
import re
import threading
from dataclasses import dataclass
from enum import Enum

from ..exceptions import BookmarkError

_SLUG_PATTERN = re.compile(r"[^a-z0-9]+")
_DIGEST_LENGTH = 10
_MAX_SLUG_LENGTH = 48


class BookmarkLocation(str, Enum):
    """Where an anchor lives in the generated document."""

    TOC = "toc"
    BODY = "body"


@dataclass(frozen=True)
class Bookmark:
    """An allocated bookmark."""

    code: str
    display_text: str
    context_id: str


def slugify(text: str) -> str:
    slug = _SLUG_PATTERN.sub("-", text.lower()).strip("-")
    return slug[:_MAX_SLUG_LENGTH].rstrip("-")


class BookmarkManager:
    """Run-scoped registry of bookmark codes.

    Allocation is idempotent and thread-safe, so a single manager can be
    shared by every documenter of one report.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._by_code: dict[str, Bookmark] = {}
        self._by_pair: dict[tuple[str, str], str] = {}

    def __len__(self) -> int:
        return len(self._by_code)

    def __contains__(self, code: object) -> bool:
        return code in self._by_code

    def allocate(self, context_id: str | None, title: str | None) -> str:
        """Return the bookmark code for a section, allocating it if needed.

        Args:
            context_id: Identifier of the enclosing context, e.g. connector GUID
            title: Section title; empty or missing falls back to the context id

        Returns:
            A non-empty code, identical for identical arguments
        """
        context = context_id or ""
        text = title or context
        pair = (context, text)

        with self._lock:
            existing = self._by_pair.get(pair)
            if existing is not None:
                return existing

            code = self._make_code(context, text)
            self._by_code[code] = Bookmark(
                code=code, display_text=text, context_id=context
            )
            self._by_pair[pair] = code
            return code

    def get(self, code: str) -> Bookmark:
        try:
            return self._by_code[code]
        except KeyError as e:
            raise BookmarkError(f"Unknown bookmark code: {code}") from e

    def resolve(self, code: str, location: BookmarkLocation) -> str:
        """Anchor id of an allocated bookmark at the given location.

        Raises:
            BookmarkError: If the code was never allocated
        """
        self.get(code)
        if location is BookmarkLocation.TOC:
            return f"toc-{code}"
        return code

    def _make_code(self, context: str, text: str) -> str:
        digest = hashlib.sha1(f"{context}\x1f{text}".encode()).hexdigest()
        slug = slugify(text) or "section"

        code = slug
        for length in range(_DIGEST_LENGTH, len(digest) + 1, 5):
            code = f"{slug}-{digest[:length]}"
            if code not in self._by_code:
                return code

        suffix = 1
        while f"{code}-{suffix}" in self._by_code:
            suffix += 1
        return f"{code}-{suffix}"
