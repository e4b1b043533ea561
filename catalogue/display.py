"""Which name to show for an ingredient. No I/O.

Precedence, first hit wins:

1. The recipe's own override for the language.
2. The names stored on the ingredient for the language. For English that is
   the canonical pair, for anything else its `translated_names` entry.
3. A pair the caller has already translated.

`None` means none of those exist yet and the caller has to translate.
"""

from catalogue.models import Ingredient, LanguageCode, NamePair


UNKNOWN_NAME = "?"


def pick_form(names: NamePair, is_plural: bool) -> str:
    if is_plural and names.plural_name:
        return names.plural_name
    return names.singular_name or names.plural_name or UNKNOWN_NAME


def resolve_display_name(
    ingredient: Ingredient,
    *,
    language: LanguageCode,
    is_plural: bool,
    override: str | None = None,
    translated: NamePair | None = None,
) -> str | None:
    if override and override.strip():
        return override
    names = ingredient.names(language) or translated
    if names is None:
        return None
    return pick_form(names, is_plural)
