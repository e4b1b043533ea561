"""Get-or-translate-and-persist for everything a recipe view shows.

Four cache slots, all keyed by language:

- `Recipe.translated_recipe` for title, category, notes, source and instructions.
- `Ingredient.translated_names`, shared by every recipe using the ingredient.
- `RecipeIngredient.translated_notes`, per use.
- `RecipeIngredient.name_overrides`, read only here, always wins.

Nothing here raises because a translation failed. The original text is shown
instead and nothing is cached, so the next view tries again. Two views that
miss the same slot at the same time both translate and both write. The results
converge so that race is accepted.

Within one view, translations run concurrently but cache writes run one after
another. Each write is a read-merge-write transaction and SQLite refuses a
second writer.
"""

import asyncio
import logging

from catalogue.display import pick_form, resolve_display_name
from catalogue.models import (
    CANONICAL_LANGUAGE,
    Ingredient,
    IngredientView,
    LanguageCode,
    NamePair,
    Recipe,
    RecipeIngredient,
    RecipeText,
    RecipeView,
)
from catalogue.repository import Store
from catalogue.text import CaseFolding, ensure_terminal_punctuation, is_blank, is_url
from catalogue.translator import TranslationService


logger = logging.getLogger(__name__)


class TranslationCache:
    def __init__(
        self,
        *,
        store: Store,
        translator: TranslationService,
        case_folding: CaseFolding | None = None,
    ) -> None:
        self.store = store
        self.translator = translator
        self.case_folding = CaseFolding() if case_folding is None else case_folding

    async def translate_recipe(self, recipe: Recipe, language: LanguageCode) -> RecipeView:
        text = await self.recipe_text(recipe, language)
        ingredients = await self.ingredient_views(
            recipe.ingredients, language=language, source_language=recipe.original_language
        )
        return RecipeView(recipe=recipe, language=language, text=text, ingredients=ingredients)

    async def recipe_text(self, recipe: Recipe, language: LanguageCode) -> RecipeText:
        if language == recipe.original_language:
            text = recipe.text
            text.instructions = [ensure_terminal_punctuation(i) for i in recipe.instructions]
            return text

        cached = recipe.translated_recipe.get(language)
        if cached is not None and cached.is_complete:
            logger.debug("Cached %s translation of %s.", language, recipe)
            return cached.copy()

        source_is_url = is_url(recipe.source)
        batch = [
            recipe.title,
            recipe.category,
            recipe.notes,
            "" if source_is_url else recipe.source,
            *recipe.instructions,
        ]
        results = await self.translator.translate_many(
            batch, language, source_language=recipe.original_language
        )
        merged = [original if r is None else r for original, r in zip(batch, results)]
        text = RecipeText(
            title=merged[0],
            category=merged[1],
            notes=merged[2],
            source=recipe.source if source_is_url else merged[3],
            instructions=merged[4:],
        )

        failures = sum(r is None for r in results)
        if failures:
            logger.warning(
                "%s of %s fragments of %s not translated to %s, not caching.",
                failures,
                len(batch),
                recipe,
                language,
            )
            return text

        recipe.translated_recipe[language] = text.copy()
        try:
            await self.store.recipes.set_translation(recipe.id, language, text)
        except Exception:
            logger.exception("Could not cache the %s translation of %s.", language, recipe)
        return text

    async def _title(self, recipe: Recipe, language: LanguageCode) -> tuple[str, bool]:
        """The title to show, and whether it is a fresh translation to cache."""
        if language == recipe.original_language or is_blank(recipe.title):
            return recipe.title, False

        cached = recipe.translated_recipe.get(language)
        if cached is not None and cached.title:
            return cached.title, False

        title = await self.translator.try_translate(
            recipe.title, language, source_language=recipe.original_language
        )
        if title is None:
            return recipe.title, False
        return title, True

    async def _cache_title(self, recipe: Recipe, language: LanguageCode, title: str) -> None:
        recipe.translated_recipe.setdefault(language, RecipeText()).title = title
        try:
            await self.store.recipes.merge_translation(recipe.id, language, {"title": title})
        except Exception:
            logger.exception("Could not cache the %s title of %s.", language, recipe)

    async def translate_title(self, recipe: Recipe, language: LanguageCode) -> str:
        """Title only, for list views. Leaves the other cached fields alone."""
        title, fresh = await self._title(recipe, language)
        if fresh:
            await self._cache_title(recipe, language, title)
        return title

    async def translate_titles(self, recipes: list[Recipe], language: LanguageCode) -> list[str]:
        results = await asyncio.gather(*(self._title(r, language) for r in recipes))
        for recipe, (title, fresh) in zip(recipes, results):
            if fresh:
                await self._cache_title(recipe, language, title)
        return [title for title, _ in results]

    async def _ingredient(self, row: RecipeIngredient) -> Ingredient:
        if row.ingredient is None:
            row.ingredient = await self.store.ingredients.get(row.ingredient_id)
        return row.ingredient

    async def _name(
        self,
        row: RecipeIngredient,
        *,
        language: LanguageCode,
        source_language: LanguageCode,
    ) -> tuple[str, NamePair | None]:
        """The name to show, and a freshly translated pair to cache if any."""
        ingredient = await self._ingredient(row)
        name = resolve_display_name(
            ingredient,
            language=language,
            is_plural=row.is_plural,
            override=row.name_overrides.get(language),
        )
        if name is not None:
            return name, None

        if ingredient.names(source_language) is None:
            source_language = CANONICAL_LANGUAGE
        source = ingredient.names(source_language) or ingredient.canonical

        singular, plural = await self.translator.translate_many(
            [source.singular_name, source.plural_name],
            language,
            source_language=source_language,
        )
        if singular is None or plural is None:
            return pick_form(source, row.is_plural), None

        translated = NamePair(
            singular_name=self.case_folding.fold(singular, language),
            plural_name=self.case_folding.fold(plural, language),
        )
        return pick_form(translated, row.is_plural), translated

    async def _cache_name(
        self, row: RecipeIngredient, language: LanguageCode, names: NamePair
    ) -> None:
        ingredient = await self._ingredient(row)
        # Rows of one recipe can share an ingredient, write it once.
        if ingredient.translated_names.get(language) == names:
            return
        ingredient.translated_names[language] = names
        try:
            await self.store.ingredients.set_translated_name(ingredient.id, language, names)
        except Exception:
            logger.exception("Could not cache the %s name of %s.", language, ingredient)

    async def ingredient_name(
        self,
        row: RecipeIngredient,
        *,
        language: LanguageCode,
        source_language: LanguageCode,
    ) -> str:
        name, fresh = await self._name(row, language=language, source_language=source_language)
        if fresh is not None:
            await self._cache_name(row, language, fresh)
        return name

    async def _notes(
        self,
        row: RecipeIngredient,
        *,
        language: LanguageCode,
        source_language: LanguageCode,
    ) -> tuple[str, bool]:
        if is_blank(row.notes) or language == source_language:
            return row.notes, False

        cached = row.translated_notes.get(language)
        if cached:
            return cached, False

        notes = await self.translator.try_translate(row.notes, language, source_language=source_language)
        if notes is None:
            return row.notes, False
        return notes, True

    async def _cache_notes(self, row: RecipeIngredient, language: LanguageCode, notes: str) -> None:
        row.translated_notes[language] = notes
        try:
            await self.store.recipe_ingredients.set_translated_notes(row.id, language, notes)
        except Exception:
            logger.exception("Could not cache the %s notes of %s.", language, row)

    async def ingredient_notes(
        self,
        row: RecipeIngredient,
        *,
        language: LanguageCode,
        source_language: LanguageCode,
    ) -> str:
        notes, fresh = await self._notes(row, language=language, source_language=source_language)
        if fresh:
            await self._cache_notes(row, language, notes)
        return notes

    async def ingredient_views(
        self,
        rows: list[RecipeIngredient],
        *,
        language: LanguageCode,
        source_language: LanguageCode,
    ) -> list[IngredientView]:
        names, notes = await asyncio.gather(
            asyncio.gather(
                *(self._name(r, language=language, source_language=source_language) for r in rows)
            ),
            asyncio.gather(
                *(self._notes(r, language=language, source_language=source_language) for r in rows)
            ),
        )

        views: list[IngredientView] = []
        for row, (name, fresh_name), (note, fresh_notes) in zip(rows, names, notes):
            if fresh_name is not None:
                await self._cache_name(row, language, fresh_name)
            if fresh_notes:
                await self._cache_notes(row, language, note)
            views.append(IngredientView(row=row, name=name, notes=note))
        return views
