import re
from typing import Iterable

from catalogue.models import CANONICAL_LANGUAGE, LanguageCode


URL_PATTERN = re.compile(r"^\s*(?:[a-z][a-z0-9+.-]*://|www\.)\S+$", re.IGNORECASE)

TERMINAL_PUNCTUATION = (".", "!", "?", "…", ":", ";", ")", '"', "'")


def is_blank(text: str | None) -> bool:
    return text is None or not text.strip()


def is_url(text: str | None) -> bool:
    return bool(text) and URL_PATTERN.match(text or "") is not None


def normalise_name(name: str) -> str:
    """Comparison form of an ingredient name."""
    return " ".join(name.split()).lower()


def normalise_language(code: str | None, default: LanguageCode = CANONICAL_LANGUAGE) -> LanguageCode:
    """`de-DE` -> `de`, `EN_au` -> `en`."""
    if not code or not code.strip():
        return default
    return re.split(r"[-_]", code.strip())[0].lower() or default


def language_from_header(header: str | None, default: LanguageCode = CANONICAL_LANGUAGE) -> LanguageCode:
    """First tag of an Accept-Language header."""
    if not header:
        return default
    first = header.split(",")[0].split(";")[0]
    return normalise_language(first, default)


def ensure_terminal_punctuation(line: str) -> str:
    stripped = line.rstrip()
    if not stripped or stripped.endswith(TERMINAL_PUNCTUATION):
        return line
    return f"{stripped}."


class CaseFolding:
    """Per-language case policy for translated names.

    German nouns are capitalised so their translations keep the case they come
    back with. Everything else is lowercased.
    """

    def __init__(self, preserve: Iterable[LanguageCode] = ("de",)) -> None:
        self.preserve = frozenset(normalise_language(p) for p in preserve)

    def fold(self, text: str, language: LanguageCode) -> str:
        text = " ".join(text.split())
        if language in self.preserve:
            return text
        return text.lower()
