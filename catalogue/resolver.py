import logging

from catalogue.models import CANONICAL_LANGUAGE, Ingredient, LanguageCode, NamePair
from catalogue.plurals import ENGLISH, EnglishPlurals, plural_rule
from catalogue.repository import IngredientStore
from catalogue.text import CaseFolding, normalise_name
from catalogue.translator import TranslationService


logger = logging.getLogger(__name__)


def find_by_names(
    ingredients: list[Ingredient],
    normalised: str,
    language: LanguageCode,
) -> Ingredient | None:
    for ingredient in ingredients:
        names = ingredient.names(language)
        if names is not None and names.matches(normalised):
            return ingredient
    return None


def find_by_forms(ingredients: list[Ingredient], forms: NamePair) -> Ingredient | None:
    """An existing ingredient whose canonical names share a form with `forms`."""
    return find_by_names(
        ingredients, normalise_name(forms.singular_name), CANONICAL_LANGUAGE
    ) or find_by_names(ingredients, normalise_name(forms.plural_name), CANONICAL_LANGUAGE)


class IngredientResolver:
    """Free text in some language -> the one canonical ingredient id.

    Store errors propagate, a recipe cannot be saved without ingredient ids.
    Translation failures do not.
    """

    def __init__(
        self,
        *,
        ingredients: IngredientStore,
        translator: TranslationService,
        case_folding: CaseFolding | None = None,
        english: EnglishPlurals = ENGLISH,
    ) -> None:
        self.ingredients = ingredients
        self.translator = translator
        self.case_folding = CaseFolding() if case_folding is None else case_folding
        self.english = english

    def local_names(self, name: str, language: LanguageCode) -> NamePair:
        singular = self.case_folding.fold(name, language)
        return NamePair(singular_name=singular, plural_name=plural_rule(language).plural(singular))

    async def _adopt(self, ingredient: Ingredient, name: str, language: LanguageCode) -> str:
        """Record what the author typed as the ingredient's name in `language`."""
        if language not in ingredient.translated_names:
            names = self.local_names(name, language)
            await self.ingredients.set_translated_name(ingredient.id, language, names)
            ingredient.translated_names[language] = names
            logger.info("Added %s name %r to %s.", language, names.singular_name, ingredient)
        return ingredient.id

    async def resolve(self, name: str, language: LanguageCode) -> str:
        normalised = normalise_name(name)
        if not normalised:
            raise ValueError("Ingredient name is empty.")
        original = " ".join(name.split())

        known = await self.ingredients.all()

        if language == CANONICAL_LANGUAGE:
            match = find_by_names(known, normalised, CANONICAL_LANGUAGE)
            if match is not None:
                return match.id
            forms = self.english.forms(normalised)
            # A misspelt plural can still singularize onto a known ingredient.
            match = find_by_forms(known, forms)
            if match is not None:
                return match.id
            ingredient = await self.ingredients.create(
                singular_name=forms.singular_name,
                plural_name=forms.plural_name,
            )
            logger.info("Created %s from %r.", ingredient, name)
            return ingredient.id

        match = find_by_names(known, normalised, language)
        if match is not None:
            return match.id

        # The author may have typed the English word with a foreign UI.
        match = find_by_names(known, normalised, CANONICAL_LANGUAGE)
        if match is not None:
            return await self._adopt(match, original, language)

        english = await self.translator.try_translate(
            original, CANONICAL_LANGUAGE, source_language=language
        )
        if english is not None:
            match = find_by_names(known, normalise_name(english), CANONICAL_LANGUAGE)
            if match is not None:
                return await self._adopt(match, original, language)
        else:
            # Degraded: foreign text becomes the canonical English name.
            logger.warning(
                "Could not translate %r from %s, using it as the English name.",
                name,
                language,
            )
            english = original

        forms = self.english.forms(normalise_name(english))
        match = find_by_forms(known, forms)
        if match is not None:
            return await self._adopt(match, original, language)

        ingredient = await self.ingredients.create(
            singular_name=forms.singular_name,
            plural_name=forms.plural_name,
            translated_names={language: self.local_names(original, language)},
        )
        logger.info("Created %s from %s %r.", ingredient, language, name)
        return ingredient.id
