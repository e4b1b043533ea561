"""The data store.

Three map-valued cache columns live here: `recipes.translated_recipe`,
`ingredients.translated_names` and `recipe_ingredients.translated_notes` /
`name_overrides`. They are stored as JSON text and always written with a
read-merge-write, so a write for one language never drops another.
"""

import json
from typing import Any, Protocol, Self

from databases import Database
from databases.interfaces import Record

from catalogue.models import (
    Ingredient,
    LanguageCode,
    NamePair,
    Recipe,
    RecipeDraft,
    RecipeIngredient,
    RecipeText,
    new_id,
)


class RecipeNotFound(Exception):
    pass


class IngredientNotFound(Exception):
    pass


class RecipeStore(Protocol):
    async def get(self, id: str) -> Recipe: ...

    async def list(self) -> tuple[Recipe, ...]: ...

    async def get_shared(self, share_token: str) -> Recipe: ...

    async def create(self, draft: RecipeDraft) -> Recipe: ...

    async def update_text(self, id: str, text: RecipeText) -> None: ...

    async def delete(self, id: str) -> None: ...

    async def translations(self, id: str) -> dict[LanguageCode, RecipeText]: ...

    async def set_translations(
        self, id: str, translations: dict[LanguageCode, RecipeText]
    ) -> None: ...

    async def set_translation(self, id: str, language: LanguageCode, text: RecipeText) -> None: ...

    async def merge_translation(
        self, id: str, language: LanguageCode, fields: dict[str, Any]
    ) -> None: ...

    async def set_sharing(self, id: str, *, share_token: str | None, is_public: bool) -> None: ...


class IngredientStore(Protocol):
    async def all(self) -> list[Ingredient]: ...

    async def get(self, id: str) -> Ingredient: ...

    async def create(
        self,
        *,
        singular_name: str,
        plural_name: str,
        translated_names: dict[LanguageCode, NamePair] | None = None,
    ) -> Ingredient: ...

    async def set_translated_name(
        self, id: str, language: LanguageCode, names: NamePair
    ) -> None: ...


class RecipeIngredientStore(Protocol):
    async def get(self, id: str) -> RecipeIngredient: ...

    async def list_for_recipe(self, recipe_id: str) -> list[RecipeIngredient]: ...

    async def replace_for_recipe(self, recipe_id: str, rows: list[RecipeIngredient]) -> None: ...

    async def delete_for_recipe(self, recipe_id: str) -> None: ...

    async def set_translated_notes(self, id: str, language: LanguageCode, notes: str) -> None: ...

    async def set_name_override(self, id: str, language: LanguageCode, name: str) -> None: ...


def dumps(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


def loads(value: str | None, default: Any) -> Any:
    if not value:
        return default
    return json.loads(value)


def translations_to_json(translations: dict[LanguageCode, RecipeText]) -> str:
    return dumps({lang: text.to_dict() for lang, text in translations.items()})


def translations_from_json(value: str | None) -> dict[LanguageCode, RecipeText]:
    return {lang: RecipeText.from_dict(d) for lang, d in loads(value, {}).items()}


def names_from_json(value: str | None) -> dict[LanguageCode, NamePair]:
    return {lang: NamePair.from_value(v) for lang, v in loads(value, {}).items()}


def recipe_from_record(r: Record) -> Recipe:
    return Recipe(
        id=r["id"],
        title=r["title"] or "",
        original_language=r["original_language"],
        instructions=loads(r["instructions"], []),
        notes=r["notes"] or "",
        source=r["source"] or "",
        category=r["category"] or "",
        translated_recipe=translations_from_json(r["translated_recipe"]),
        share_token=r["share_token"],
        is_public=bool(r["is_public"]),
    )


def ingredient_from_record(r: Record) -> Ingredient:
    return Ingredient(
        id=r["id"],
        singular_name=r["singular_name"],
        plural_name=r["plural_name"],
        translated_names=names_from_json(r["translated_names"]),
    )


def recipe_ingredient_from_record(r: Record) -> RecipeIngredient:
    return RecipeIngredient(
        id=r["id"],
        recipe_id=r["recipe_id"],
        ingredient_id=r["ingredient_id"],
        quantity=r["quantity"] or "",
        unit=r["unit"] or "",
        notes=r["notes"] or "",
        subheading=r["subheading"] or "",
        order_index=r["order_index"] or 0,
        is_plural=bool(r["is_plural"]),
        name_overrides=loads(r["name_overrides"], {}),
        translated_notes=loads(r["translated_notes"], {}),
    )


GET_RECIPE = "SELECT * FROM recipes WHERE id = :id"

LIST_RECIPES = "SELECT * FROM recipes ORDER BY title"

GET_SHARED_RECIPE = """
SELECT * FROM recipes WHERE share_token = :share_token AND is_public = :is_public
"""

CREATE_RECIPE = """
INSERT INTO recipes(
    id, title, original_language, instructions, notes, source, category,
    translated_recipe, share_token, is_public
)
VALUES (
    :id, :title, :original_language, :instructions, :notes, :source, :category,
    :translated_recipe, NULL, :is_public
)
"""

UPDATE_RECIPE_TEXT = """
UPDATE recipes
SET title = :title, category = :category, notes = :notes, source = :source,
    instructions = :instructions
WHERE id = :id
"""

DELETE_RECIPE = "DELETE FROM recipes WHERE id = :id"

GET_TRANSLATED_RECIPE = "SELECT translated_recipe FROM recipes WHERE id = :id"

SET_TRANSLATED_RECIPE = "UPDATE recipes SET translated_recipe = :translated_recipe WHERE id = :id"

SET_SHARING = """
UPDATE recipes SET share_token = :share_token, is_public = :is_public WHERE id = :id
"""


class RecipeRepository:
    """Recipes repository."""

    def __init__(self, db: Database) -> None:
        self.db = db

    async def _fetch(self, id: str) -> Record:
        result = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            GET_RECIPE, values={"id": id}
        )
        if result is None:
            raise RecipeNotFound(f"{id}")
        return result

    async def get(self, id: str) -> Recipe:
        return recipe_from_record(await self._fetch(id))

    async def list(self) -> tuple[Recipe, ...]:
        result = await self.db.fetch_all(  # pyright: ignore[reportUnknownMemberType]
            LIST_RECIPES
        )
        return tuple(recipe_from_record(r) for r in result)

    async def get_shared(self, share_token: str) -> Recipe:
        result = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            GET_SHARED_RECIPE, values={"share_token": share_token, "is_public": True}
        )
        if result is None:
            raise RecipeNotFound(f"shared:{share_token}")
        return recipe_from_record(result)

    async def create(self, draft: RecipeDraft) -> Recipe:
        recipe = Recipe(
            id=new_id(),
            title=draft.title,
            original_language=draft.original_language,
            instructions=list(draft.instructions),
            notes=draft.notes,
            source=draft.source,
            category=draft.category,
        )
        await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
            CREATE_RECIPE,
            values={
                "id": recipe.id,
                "title": recipe.title,
                "original_language": recipe.original_language,
                "instructions": dumps(recipe.instructions),
                "notes": recipe.notes,
                "source": recipe.source,
                "category": recipe.category,
                "translated_recipe": dumps({}),
                "is_public": False,
            },
        )
        return recipe

    async def update_text(self, id: str, text: RecipeText) -> None:
        await self._fetch(id)
        await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
            UPDATE_RECIPE_TEXT,
            values={
                "id": id,
                "title": text.title,
                "category": text.category,
                "notes": text.notes,
                "source": text.source,
                "instructions": dumps(text.instructions or []),
            },
        )

    async def delete(self, id: str) -> None:
        await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
            DELETE_RECIPE, values={"id": id}
        )

    async def translations(self, id: str) -> dict[LanguageCode, RecipeText]:
        result = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            GET_TRANSLATED_RECIPE, values={"id": id}
        )
        if result is None:
            raise RecipeNotFound(f"{id}")
        return translations_from_json(result["translated_recipe"])

    async def set_translations(
        self, id: str, translations: dict[LanguageCode, RecipeText]
    ) -> None:
        await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
            SET_TRANSLATED_RECIPE,
            values={"id": id, "translated_recipe": translations_to_json(translations)},
        )

    async def set_translation(self, id: str, language: LanguageCode, text: RecipeText) -> None:
        async with self.db.transaction():
            translations = await self.translations(id)
            translations[language] = text
            await self.set_translations(id, translations)

    async def merge_translation(
        self, id: str, language: LanguageCode, fields: dict[str, Any]
    ) -> None:
        async with self.db.transaction():
            translations = await self.translations(id)
            current = translations.get(language, RecipeText()).to_dict()
            translations[language] = RecipeText.from_dict({**current, **fields})
            await self.set_translations(id, translations)

    async def set_sharing(self, id: str, *, share_token: str | None, is_public: bool) -> None:
        await self._fetch(id)
        await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
            SET_SHARING,
            values={"id": id, "share_token": share_token, "is_public": is_public},
        )


LIST_INGREDIENTS = "SELECT * FROM ingredients"

GET_INGREDIENT = "SELECT * FROM ingredients WHERE id = :id"

CREATE_INGREDIENT = """
INSERT INTO ingredients(id, singular_name, plural_name, translated_names)
VALUES (:id, :singular_name, :plural_name, :translated_names)
"""

SET_TRANSLATED_NAMES = """
UPDATE ingredients SET translated_names = :translated_names WHERE id = :id
"""


class IngredientRepository:
    """Canonical ingredients repository."""

    def __init__(self, db: Database) -> None:
        self.db = db

    async def all(self) -> list[Ingredient]:
        # A full scan is fine at catalogue scale.
        result = await self.db.fetch_all(  # pyright: ignore[reportUnknownMemberType]
            LIST_INGREDIENTS
        )
        return [ingredient_from_record(r) for r in result]

    async def get(self, id: str) -> Ingredient:
        result = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            GET_INGREDIENT, values={"id": id}
        )
        if result is None:
            raise IngredientNotFound(f"{id}")
        return ingredient_from_record(result)

    async def create(
        self,
        *,
        singular_name: str,
        plural_name: str,
        translated_names: dict[LanguageCode, NamePair] | None = None,
    ) -> Ingredient:
        ingredient = Ingredient(
            id=new_id(),
            singular_name=singular_name,
            plural_name=plural_name,
            translated_names=translated_names,
        )
        await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
            CREATE_INGREDIENT,
            values={
                "id": ingredient.id,
                "singular_name": ingredient.singular_name,
                "plural_name": ingredient.plural_name,
                "translated_names": dumps(
                    {k: v.to_dict() for k, v in ingredient.translated_names.items()}
                ),
            },
        )
        return ingredient

    async def set_translated_name(
        self, id: str, language: LanguageCode, names: NamePair
    ) -> None:
        async with self.db.transaction():
            ingredient = await self.get(id)
            translated = {k: v.to_dict() for k, v in ingredient.translated_names.items()}
            translated[language] = names.to_dict()
            await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
                SET_TRANSLATED_NAMES,
                values={"id": id, "translated_names": dumps(translated)},
            )


GET_RECIPE_INGREDIENT = "SELECT * FROM recipe_ingredients WHERE id = :id"

LIST_RECIPE_INGREDIENTS = """
SELECT * FROM recipe_ingredients WHERE recipe_id = :recipe_id ORDER BY order_index
"""

DELETE_RECIPE_INGREDIENTS = "DELETE FROM recipe_ingredients WHERE recipe_id = :recipe_id"

CREATE_RECIPE_INGREDIENT = """
INSERT INTO recipe_ingredients(
    id, recipe_id, ingredient_id, quantity, unit, notes, subheading,
    order_index, is_plural, name_overrides, translated_notes
)
VALUES (
    :id, :recipe_id, :ingredient_id, :quantity, :unit, :notes, :subheading,
    :order_index, :is_plural, :name_overrides, :translated_notes
)
"""

SET_TRANSLATED_NOTES = """
UPDATE recipe_ingredients SET translated_notes = :translated_notes WHERE id = :id
"""

SET_NAME_OVERRIDES = """
UPDATE recipe_ingredients SET name_overrides = :name_overrides WHERE id = :id
"""


class RecipeIngredientRepository:
    """A recipe's uses of ingredients."""

    def __init__(self, db: Database) -> None:
        self.db = db

    async def get(self, id: str) -> RecipeIngredient:
        result = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            GET_RECIPE_INGREDIENT, values={"id": id}
        )
        if result is None:
            raise IngredientNotFound(f"recipe ingredient {id}")
        return recipe_ingredient_from_record(result)

    async def list_for_recipe(self, recipe_id: str) -> list[RecipeIngredient]:
        result = await self.db.fetch_all(  # pyright: ignore[reportUnknownMemberType]
            LIST_RECIPE_INGREDIENTS, values={"recipe_id": recipe_id}
        )
        return [recipe_ingredient_from_record(r) for r in result]

    async def replace_for_recipe(self, recipe_id: str, rows: list[RecipeIngredient]) -> None:
        async with self.db.transaction():
            await self.delete_for_recipe(recipe_id)
            for row in rows:
                await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
                    CREATE_RECIPE_INGREDIENT,
                    values={
                        "id": row.id,
                        "recipe_id": recipe_id,
                        "ingredient_id": row.ingredient_id,
                        "quantity": row.quantity,
                        "unit": row.unit,
                        "notes": row.notes,
                        "subheading": row.subheading,
                        "order_index": row.order_index,
                        "is_plural": row.is_plural,
                        "name_overrides": dumps(row.name_overrides),
                        "translated_notes": dumps(row.translated_notes),
                    },
                )

    async def delete_for_recipe(self, recipe_id: str) -> None:
        await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
            DELETE_RECIPE_INGREDIENTS, values={"recipe_id": recipe_id}
        )

    async def set_translated_notes(self, id: str, language: LanguageCode, notes: str) -> None:
        async with self.db.transaction():
            row = await self.get(id)
            row.translated_notes[language] = notes
            await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
                SET_TRANSLATED_NOTES,
                values={"id": id, "translated_notes": dumps(row.translated_notes)},
            )

    async def set_name_override(self, id: str, language: LanguageCode, name: str) -> None:
        async with self.db.transaction():
            row = await self.get(id)
            row.name_overrides[language] = name
            await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
                SET_NAME_OVERRIDES,
                values={"id": id, "name_overrides": dumps(row.name_overrides)},
            )


class Store:
    """The three repositories, plus loading a recipe with its ingredients."""

    def __init__(
        self,
        *,
        recipes: RecipeStore,
        ingredients: IngredientStore,
        recipe_ingredients: RecipeIngredientStore,
    ) -> None:
        self.recipes = recipes
        self.ingredients = ingredients
        self.recipe_ingredients = recipe_ingredients

    @classmethod
    def from_database(cls, db: Database) -> Self:
        return cls(
            recipes=RecipeRepository(db),
            ingredients=IngredientRepository(db),
            recipe_ingredients=RecipeIngredientRepository(db),
        )

    async def attach_ingredients(self, recipe: Recipe) -> Recipe:
        rows = await self.recipe_ingredients.list_for_recipe(recipe.id)
        loaded: dict[str, Ingredient] = {}
        for row in rows:
            if row.ingredient_id not in loaded:
                loaded[row.ingredient_id] = await self.ingredients.get(row.ingredient_id)
            row.ingredient = loaded[row.ingredient_id]
        recipe.ingredients = rows
        return recipe

    async def load_recipe(self, recipe_id: str) -> Recipe:
        recipe = await self.recipes.get(recipe_id)
        return await self.attach_ingredients(recipe)

    async def load_shared_recipe(self, share_token: str) -> Recipe:
        recipe = await self.recipes.get_shared(share_token)
        return await self.attach_ingredients(recipe)
