import uuid
from typing import Any, Self


type LanguageCode = str


CANONICAL_LANGUAGE: LanguageCode = "en"

RECIPE_TEXT_FIELDS = ("title", "category", "notes", "source", "instructions")


def new_id() -> str:
    return uuid.uuid4().hex


class NamePair:
    def __init__(self, *, singular_name: str, plural_name: str) -> None:
        self.singular_name = singular_name
        self.plural_name = plural_name

    @classmethod
    def from_value(cls, value: Any) -> Self:
        # Older rows cached a single string per language.
        if isinstance(value, str):
            return cls(singular_name=value, plural_name=value)
        return cls(
            singular_name=value.get("singular_name") or "",
            plural_name=value.get("plural_name") or "",
        )

    def matches(self, normalised: str) -> bool:
        return normalised in (self.singular_name.lower(), self.plural_name.lower())

    def to_dict(self) -> dict[str, str]:
        return {"singular_name": self.singular_name, "plural_name": self.plural_name}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NamePair):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"<NamePair({self.singular_name}, {self.plural_name})>"


class Ingredient:
    def __init__(
        self,
        *,
        id: str,
        singular_name: str,
        plural_name: str,
        translated_names: dict[LanguageCode, NamePair] | None = None,
    ) -> None:
        self.id = id
        self.singular_name = singular_name
        self.plural_name = plural_name
        self.translated_names = {} if translated_names is None else translated_names

    @property
    def canonical(self) -> NamePair:
        return NamePair(singular_name=self.singular_name, plural_name=self.plural_name)

    def names(self, language: LanguageCode) -> NamePair | None:
        if language == CANONICAL_LANGUAGE:
            return self.canonical
        return self.translated_names.get(language)

    def __repr__(self) -> str:
        return f"<Ingredient(id={self.id}, name={self.singular_name})>"


class RecipeIngredient:
    def __init__(
        self,
        *,
        id: str,
        recipe_id: str,
        ingredient_id: str,
        quantity: str = "",
        unit: str = "",
        notes: str = "",
        subheading: str = "",
        order_index: int = 0,
        is_plural: bool = False,
        name_overrides: dict[LanguageCode, str] | None = None,
        translated_notes: dict[LanguageCode, str] | None = None,
        ingredient: Ingredient | None = None,
    ) -> None:
        self.id = id
        self.recipe_id = recipe_id
        self.ingredient_id = ingredient_id
        # Kept exactly as typed, "1 1/2" stays "1 1/2".
        self.quantity = quantity
        self.unit = unit
        self.notes = notes
        self.subheading = subheading
        self.order_index = order_index
        self.is_plural = is_plural
        self.name_overrides = {} if name_overrides is None else name_overrides
        self.translated_notes = {} if translated_notes is None else translated_notes
        self.ingredient = ingredient

    def __repr__(self) -> str:
        return f"<RecipeIngredient(id={self.id}, ingredient_id={self.ingredient_id})>"


class RecipeText:
    """The translatable fields of a recipe.

    Used both for the source-language content and for each cached language in
    `Recipe.translated_recipe`. A field that is `None` has not been cached.
    """

    def __init__(
        self,
        *,
        title: str | None = None,
        category: str | None = None,
        notes: str | None = None,
        source: str | None = None,
        instructions: list[str] | None = None,
    ) -> None:
        self.title = title
        self.category = category
        self.notes = notes
        self.source = source
        self.instructions = instructions

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        instructions = data.get("instructions")
        return cls(
            title=data.get("title"),
            category=data.get("category"),
            notes=data.get("notes"),
            source=data.get("source"),
            instructions=None if instructions is None else list(instructions),
        )

    @property
    def is_complete(self) -> bool:
        """A slot written by the title-only path only holds a title."""
        return all(getattr(self, field) is not None for field in RECIPE_TEXT_FIELDS)

    def changed_fields(self, other: "RecipeText") -> set[str]:
        return {
            field
            for field in RECIPE_TEXT_FIELDS
            if getattr(self, field) != getattr(other, field)
        }

    def copy(self) -> "RecipeText":
        return RecipeText.from_dict(self.to_dict())

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "category": self.category,
            "notes": self.notes,
            "source": self.source,
            "instructions": None if self.instructions is None else list(self.instructions),
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RecipeText):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"<RecipeText(title={self.title}, complete={self.is_complete})>"


class Recipe:
    def __init__(
        self,
        *,
        id: str,
        title: str,
        original_language: LanguageCode = CANONICAL_LANGUAGE,
        instructions: list[str] | None = None,
        notes: str = "",
        source: str = "",
        category: str = "",
        translated_recipe: dict[LanguageCode, RecipeText] | None = None,
        share_token: str | None = None,
        is_public: bool = False,
        ingredients: list[RecipeIngredient] | None = None,
    ) -> None:
        self.id = id
        self.title = title
        self.original_language = original_language
        self.instructions = [] if instructions is None else instructions
        self.notes = notes
        self.source = source
        self.category = category
        self.translated_recipe = {} if translated_recipe is None else translated_recipe
        self.share_token = share_token
        self.is_public = is_public
        self.ingredients = [] if ingredients is None else ingredients

    @property
    def text(self) -> RecipeText:
        return RecipeText(
            title=self.title,
            category=self.category,
            notes=self.notes,
            source=self.source,
            instructions=list(self.instructions),
        )

    def __repr__(self) -> str:
        return f"<Recipe(id={self.id}, title={self.title})>"


class IngredientDraft:
    """An ingredient row as submitted by the authoring UI."""

    def __init__(
        self,
        *,
        name: str = "",
        ingredient_id: str | None = None,
        quantity: str = "",
        unit: str = "",
        notes: str = "",
        subheading: str = "",
        is_plural: bool = False,
    ) -> None:
        self.name = name
        self.ingredient_id = ingredient_id
        self.quantity = quantity
        self.unit = unit
        self.notes = notes
        self.subheading = subheading
        self.is_plural = is_plural

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return cls(
            name=str(data.get("name") or ""),
            ingredient_id=data.get("ingredient_id"),
            quantity=str(data.get("quantity") or ""),
            unit=str(data.get("unit") or ""),
            notes=str(data.get("notes") or ""),
            subheading=str(data.get("subheading") or ""),
            is_plural=bool(data.get("is_plural", False)),
        )


class RecipeDraft:
    """A recipe as submitted by the authoring UI."""

    def __init__(
        self,
        *,
        title: str,
        original_language: LanguageCode = CANONICAL_LANGUAGE,
        instructions: list[str] | None = None,
        notes: str = "",
        source: str = "",
        category: str = "",
        ingredients: list[IngredientDraft] | None = None,
    ) -> None:
        self.title = title
        self.original_language = original_language
        self.instructions = [] if instructions is None else instructions
        self.notes = notes
        self.source = source
        self.category = category
        self.ingredients = [] if ingredients is None else ingredients

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return cls(
            title=str(data.get("title") or ""),
            original_language=str(data.get("original_language") or CANONICAL_LANGUAGE),
            instructions=[str(i) for i in data.get("instructions") or []],
            notes=str(data.get("notes") or ""),
            source=str(data.get("source") or ""),
            category=str(data.get("category") or ""),
            ingredients=[IngredientDraft.from_dict(i) for i in data.get("ingredients") or []],
        )

    @property
    def text(self) -> RecipeText:
        return RecipeText(
            title=self.title,
            category=self.category,
            notes=self.notes,
            source=self.source,
            instructions=list(self.instructions),
        )


class IngredientView:
    def __init__(
        self,
        *,
        row: RecipeIngredient,
        name: str,
        notes: str,
    ) -> None:
        self.recipe_ingredient_id = row.id
        self.ingredient_id = row.ingredient_id
        self.name = name
        self.notes = notes
        self.quantity = row.quantity
        self.unit = row.unit
        self.subheading = row.subheading
        self.order_index = row.order_index
        self.is_plural = row.is_plural

    def to_dict(self) -> dict[str, Any]:
        return {
            "recipe_ingredient_id": self.recipe_ingredient_id,
            "ingredient_id": self.ingredient_id,
            "name": self.name,
            "notes": self.notes,
            "quantity": self.quantity,
            "unit": self.unit,
            "subheading": self.subheading,
            "order_index": self.order_index,
            "is_plural": self.is_plural,
        }


class RecipeView:
    def __init__(
        self,
        *,
        recipe: Recipe,
        language: LanguageCode,
        text: RecipeText,
        ingredients: list[IngredientView],
    ) -> None:
        self.id = recipe.id
        self.original_language = recipe.original_language
        self.language = language
        self.is_translated = language != recipe.original_language
        self.title = text.title or ""
        self.category = text.category or ""
        self.notes = text.notes or ""
        self.source = text.source or ""
        self.instructions = list(text.instructions or [])
        self.ingredients = sorted(ingredients, key=lambda i: i.order_index)

    @property
    def ungrouped(self) -> list[IngredientView]:
        return [i for i in self.ingredients if not i.subheading.strip()]

    @property
    def sections(self) -> list[tuple[str, list[IngredientView]]]:
        sections: dict[str, list[IngredientView]] = {}
        for ingredient in self.ingredients:
            if ingredient.subheading.strip():
                sections.setdefault(ingredient.subheading, []).append(ingredient)
        return list(sections.items())

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "language": self.language,
            "original_language": self.original_language,
            "is_translated": self.is_translated,
            "title": self.title,
            "category": self.category,
            "notes": self.notes,
            "source": self.source,
            "instructions": self.instructions,
            "ingredients": [i.to_dict() for i in self.ingredients],
            "ungrouped": [i.to_dict() for i in self.ungrouped],
            "sections": [
                {"subheading": subheading, "ingredients": [i.to_dict() for i in items]}
                for subheading, items in self.sections
            ],
        }
