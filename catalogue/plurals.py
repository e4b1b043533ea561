"""Plural forms for ingredient names.

English goes through `inflect`. Other languages get a small set of suffix
rules, good enough for a sensible default that the author can override.
"""

from typing import Protocol

import inflect

from catalogue.models import CANONICAL_LANGUAGE, LanguageCode, NamePair


class PluralRule(Protocol):
    def plural(self, singular: str) -> str:
        ...


class EnglishPlurals:
    def __init__(self, engine: inflect.engine | None = None) -> None:
        self.engine = inflect.engine() if engine is None else engine

    def singular(self, word: str) -> str:
        if not word:
            return word
        singular = self.engine.singular_noun(word)
        # False means inflect thinks it is already singular.
        return word if singular is False else singular

    def plural(self, singular: str) -> str:
        if not singular:
            return singular
        return self.engine.plural_noun(singular)

    def forms(self, text: str) -> NamePair:
        """Singularize then pluralize, users type either form."""
        singular = self.singular(text)
        return NamePair(singular_name=singular, plural_name=self.plural(singular))


class SuffixPlurals:
    """First matching `(ending, replacement)` rule wins.

    An empty replacement with a matching ending leaves the word unchanged.
    """

    def __init__(
        self,
        rules: list[tuple[str, str]],
        *,
        default_suffix: str = "s",
    ) -> None:
        self.rules = rules
        self.default_suffix = default_suffix

    def plural(self, singular: str) -> str:
        if not singular:
            return singular
        head, _, last = singular.rpartition(" ")
        lowered = last.lower()
        for ending, replacement in self.rules:
            if lowered.endswith(ending):
                plural = last[: len(last) - len(ending)] + replacement if replacement else last
                break
        else:
            plural = last + self.default_suffix
        return f"{head} {plural}" if head else plural


ENGLISH = EnglishPlurals()

PLURAL_RULES: dict[LanguageCode, PluralRule] = {
    CANONICAL_LANGUAGE: ENGLISH,
    "de": SuffixPlurals(
        [
            ("chen", ""),
            ("lein", ""),
            ("el", ""),
            ("er", ""),
            ("en", ""),
            ("e", "en"),
            ("ung", "ungen"),
            ("a", "as"),
            ("i", "is"),
            ("o", "os"),
            ("u", "us"),
        ],
        default_suffix="e",
    ),
    "fr": SuffixPlurals(
        [("s", ""), ("x", ""), ("z", ""), ("eau", "eaux"), ("au", "aux"), ("eu", "eux"), ("al", "aux")]
    ),
    "es": SuffixPlurals(
        [
            ("z", "ces"),
            ("a", "as"),
            ("e", "es"),
            ("i", "is"),
            ("o", "os"),
            ("u", "us"),
            ("s", ""),
        ],
        default_suffix="es",
    ),
    "it": SuffixPlurals(
        [("co", "chi"), ("go", "ghi"), ("ca", "che"), ("ga", "ghe"), ("o", "i"), ("a", "e"), ("e", "i")],
        default_suffix="",
    ),
    "nl": SuffixPlurals(
        [("e", "es"), ("el", "els"), ("er", "ers"), ("en", "ens"), ("a", "'s"), ("o", "'s")],
        default_suffix="en",
    ),
}


def plural_rule(language: LanguageCode) -> PluralRule:
    """Registered rule for `language`, the English library rule otherwise."""
    return PLURAL_RULES.get(language, ENGLISH)
