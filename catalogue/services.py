import logging
from typing import Any
import uuid

from catalogue.models import (
    RECIPE_TEXT_FIELDS,
    IngredientDraft,
    LanguageCode,
    Recipe,
    RecipeDraft,
    RecipeIngredient,
    RecipeView,
    new_id,
)
from catalogue.repository import Store
from catalogue.resolver import IngredientResolver
from catalogue.translations import TranslationCache
from catalogue.translator import TranslationService
from catalogue.updater import update_recipe_translations


logger = logging.getLogger(__name__)


async def resolve_ingredients(
    ingredients: list[IngredientDraft],
    language: LanguageCode,
    *,
    resolver: IngredientResolver,
) -> list[str]:
    # One at a time, the same new ingredient twice in a recipe must not be
    # created twice.
    ids: list[str] = []
    for ingredient in ingredients:
        if ingredient.ingredient_id:
            ids.append(ingredient.ingredient_id)
        elif ingredient.name.strip():
            ids.append(await resolver.resolve(ingredient.name, language))
        else:
            raise ValueError("Ingredient must have either ingredient_id or name.")
    return ids


def make_rows(
    recipe_id: str,
    ingredients: list[IngredientDraft],
    ingredient_ids: list[str],
) -> list[RecipeIngredient]:
    return [
        RecipeIngredient(
            id=new_id(),
            recipe_id=recipe_id,
            ingredient_id=ingredient_id,
            quantity=ingredient.quantity,
            unit=ingredient.unit,
            notes=ingredient.notes,
            subheading=ingredient.subheading,
            order_index=index,
            is_plural=ingredient.is_plural,
        )
        for index, (ingredient, ingredient_id) in enumerate(zip(ingredients, ingredient_ids))
    ]


async def save_recipe(
    draft: RecipeDraft,
    *,
    store: Store,
    resolver: IngredientResolver,
    translator: TranslationService,
    recipe_id: str | None = None,
) -> Recipe:
    """Create a recipe, or replace the content of an existing one.

    Ingredients are resolved before anything is written, so a resolver failure
    leaves the store untouched. On an edit the ingredient rows are replaced
    wholesale and every cached translation of a changed field is redone.
    """
    if not draft.title.strip():
        raise ValueError("Recipe needs a title.")

    if recipe_id is None:
        ids = await resolve_ingredients(
            draft.ingredients, draft.original_language, resolver=resolver
        )
        recipe = await store.recipes.create(draft)
        await store.recipe_ingredients.replace_for_recipe(
            recipe.id, make_rows(recipe.id, draft.ingredients, ids)
        )
        logger.info("Created %s.", recipe)
        return await store.attach_ingredients(recipe)

    old = await store.recipes.get(recipe_id)
    # The original language is fixed once the recipe exists.
    ids = await resolve_ingredients(draft.ingredients, old.original_language, resolver=resolver)
    await store.recipe_ingredients.replace_for_recipe(
        recipe_id, make_rows(recipe_id, draft.ingredients, ids)
    )
    # Text last, the updater must run whenever the source text has changed.
    new_text = draft.text
    await store.recipes.update_text(recipe_id, new_text)
    await update_recipe_translations(
        recipe_id,
        old.text,
        new_text,
        source_language=old.original_language,
        recipes=store.recipes,
        translator=translator,
    )
    logger.info("Updated %s.", old)
    return await store.load_recipe(recipe_id)


async def delete_recipe(recipe_id: str, *, store: Store) -> None:
    await store.recipes.get(recipe_id)
    await store.recipe_ingredients.delete_for_recipe(recipe_id)
    await store.recipes.delete(recipe_id)


async def get_translated_recipe(
    recipe_id: str,
    language: LanguageCode,
    *,
    store: Store,
    cache: TranslationCache,
) -> RecipeView:
    recipe = await store.load_recipe(recipe_id)
    return await cache.translate_recipe(recipe, language)


async def list_translated_titles(
    language: LanguageCode,
    *,
    store: Store,
    cache: TranslationCache,
) -> list[tuple[Recipe, str]]:
    recipes = list(await store.recipes.list())
    titles = await cache.translate_titles(recipes, language)
    return list(zip(recipes, titles))


def share_token_factory() -> str:
    return uuid.uuid4().hex[:16]


async def create_share_link(recipe_id: str, *, store: Store) -> tuple[str, bool]:
    """The recipe's share token, and whether it already had one."""
    recipe = await store.recipes.get(recipe_id)
    if recipe.share_token:
        return recipe.share_token, True

    token = share_token_factory()
    await store.recipes.set_sharing(recipe_id, share_token=token, is_public=True)
    logger.info("Shared %s.", recipe)
    return token, False


async def stop_sharing(recipe_id: str, *, store: Store) -> None:
    await store.recipes.set_sharing(recipe_id, share_token=None, is_public=False)


async def fetch_shared_recipe(
    share_token: str,
    language: LanguageCode,
    *,
    store: Store,
    cache: TranslationCache,
) -> RecipeView:
    if not share_token:
        raise ValueError("Share token is required.")
    recipe = await store.load_shared_recipe(share_token)
    return await cache.translate_recipe(recipe, language)


async def edit_ingredient_translation(
    recipe_ingredient_id: str,
    language: LanguageCode,
    *,
    store: Store,
    name: str | None = None,
    notes: str | None = None,
) -> None:
    """Hand-corrected name or notes for one use of an ingredient."""
    if name is not None and name.strip():
        await store.recipe_ingredients.set_name_override(
            recipe_ingredient_id, language, name.strip()
        )
    if notes is not None and notes.strip():
        await store.recipe_ingredients.set_translated_notes(
            recipe_ingredient_id, language, notes.strip()
        )


async def edit_recipe_translation(
    recipe_id: str,
    language: LanguageCode,
    fields: dict[str, Any],
    *,
    store: Store,
) -> None:
    """Hand-corrected fields of a cached recipe translation."""
    unknown = set(fields) - set(RECIPE_TEXT_FIELDS)
    if unknown:
        raise ValueError(f"Not translatable: {', '.join(sorted(unknown))}")

    recipe = await store.recipes.get(recipe_id)
    if language == recipe.original_language:
        raise ValueError(f"{recipe} is written in {language}, edit the recipe instead.")
    await store.recipes.merge_translation(recipe_id, language, fields)


async def clear_recipe_translations(recipe_id: str, *, store: Store) -> bool:
    """Drop every cached language of a recipe, the next views translate afresh.

    Whether the cache was cleared. A failed write is logged, not raised.
    """
    recipe = await store.recipes.get(recipe_id)
    try:
        await store.recipes.set_translations(recipe_id, {})
    except Exception:
        logger.exception("Could not clear the translations of %s.", recipe)
        return False
    logger.info("Cleared the translations of %s.", recipe)
    return True
