import pytest

from catalogue.models import NamePair
from catalogue.repository import Store
from catalogue.resolver import IngredientResolver
from catalogue.text import CaseFolding
from catalogue.translator import TranslationService
from tests.fakes import FakeTranslator, StoreDown


@pytest.mark.asyncio
async def test_english_spellings_share_one_ingredient(
    store: Store, resolver: IngredientResolver, fake_translator: FakeTranslator
) -> None:
    ids = [await resolver.resolve(name, "en") for name in ("Tomato", "tomato", "tomatoes", " TOMATO ")]

    assert len(set(ids)) == 1
    (ingredient,) = await store.ingredients.all()
    assert ingredient.canonical == NamePair(singular_name="tomato", plural_name="tomatoes")
    assert fake_translator.calls == []


@pytest.mark.asyncio
async def test_english_plural_typed_first(store: Store, resolver: IngredientResolver) -> None:
    id = await resolver.resolve("Eggs", "en")
    got = await store.ingredients.get(id)
    assert got.canonical == NamePair(singular_name="egg", plural_name="eggs")
    assert await resolver.resolve("egg", "en") == id


@pytest.mark.asyncio
async def test_blank_name(resolver: IngredientResolver) -> None:
    with pytest.raises(ValueError):
        await resolver.resolve("   ", "de")


@pytest.mark.asyncio
async def test_foreign_name_reuses_english_ingredient(
    store: Store, resolver: IngredientResolver, fake_translator: FakeTranslator
) -> None:
    fake_translator.dictionary[("Tomate", "en")] = "tomato"
    tomato = await resolver.resolve("tomato", "en")

    got = await resolver.resolve("Tomate", "de")

    assert got == tomato
    assert len(await store.ingredients.all()) == 1
    ingredient = await store.ingredients.get(tomato)
    assert ingredient.translated_names["de"] == NamePair(singular_name="Tomate", plural_name="Tomaten")
    assert fake_translator.calls == [("Tomate", "en", "de")]


@pytest.mark.asyncio
async def test_adopted_name_found_without_translation(
    store: Store, resolver: IngredientResolver, fake_translator: FakeTranslator
) -> None:
    fake_translator.dictionary[("Tomate", "en")] = "tomato"
    tomato = await resolver.resolve("tomato", "en")
    await resolver.resolve("Tomate", "de")
    calls = len(fake_translator.calls)

    assert await resolver.resolve("tomaten", "de") == tomato
    assert await resolver.resolve("TOMATE", "de") == tomato
    assert len(fake_translator.calls) == calls


@pytest.mark.asyncio
async def test_english_word_with_foreign_ui(
    store: Store, resolver: IngredientResolver, fake_translator: FakeTranslator
) -> None:
    tomato = await resolver.resolve("tomato", "en")

    got = await resolver.resolve("tomato", "de")

    assert got == tomato
    assert fake_translator.calls == []
    ingredient = await store.ingredients.get(tomato)
    assert ingredient.translated_names["de"].singular_name == "tomato"


@pytest.mark.asyncio
async def test_existing_translation_not_overwritten(store: Store, resolver: IngredientResolver) -> None:
    existing = NamePair(singular_name="Tomate", plural_name="Tomaten")
    ingredient = await store.ingredients.create(
        singular_name="tomato", plural_name="tomatoes", translated_names={"de": existing}
    )

    assert await resolver.resolve("Tomatoes", "de") == ingredient.id

    got = await store.ingredients.get(ingredient.id)
    assert got.translated_names["de"] == existing


@pytest.mark.asyncio
async def test_new_foreign_ingredient(store: Store, resolver: IngredientResolver, fake_translator: FakeTranslator) -> None:
    fake_translator.dictionary[("Zwiebel", "en")] = "Onions"

    id = await resolver.resolve("Zwiebel", "de")

    ingredient = await store.ingredients.get(id)
    assert ingredient.canonical == NamePair(singular_name="onion", plural_name="onions")
    assert ingredient.translated_names == {
        "de": NamePair(singular_name="Zwiebel", plural_name="Zwiebel")
    }
    assert await resolver.resolve("onion", "en") == id


@pytest.mark.asyncio
async def test_foreign_names_are_case_folded(store: Store, resolver: IngredientResolver, fake_translator: FakeTranslator) -> None:
    fake_translator.dictionary[("Pomme", "en")] = "apple"

    id = await resolver.resolve("Pomme", "fr")

    ingredient = await store.ingredients.get(id)
    assert ingredient.translated_names["fr"] == NamePair(singular_name="pomme", plural_name="pommes")


@pytest.mark.asyncio
async def test_case_folding_is_configurable(store: Store, fake_translator: FakeTranslator) -> None:
    fake_translator.dictionary[("Pomme", "en")] = "apple"
    resolver = IngredientResolver(
        ingredients=store.ingredients,
        translator=TranslationService(fake_translator),
        case_folding=CaseFolding(["de", "fr"]),
    )

    id = await resolver.resolve("Pomme", "fr")

    ingredient = await store.ingredients.get(id)
    assert ingredient.translated_names["fr"].singular_name == "Pomme"


@pytest.mark.asyncio
async def test_untranslatable_name_becomes_canonical(store: Store, resolver: IngredientResolver, fake_translator: FakeTranslator) -> None:
    fake_translator.fail_on.add("Knoblauch")

    id = await resolver.resolve("Knoblauch", "de")

    ingredient = await store.ingredients.get(id)
    assert ingredient.singular_name == "knoblauch"
    assert ingredient.translated_names["de"].singular_name == "Knoblauch"
    assert await resolver.resolve("knoblauch", "de") == id


@pytest.mark.asyncio
async def test_store_errors_propagate(store: Store, resolver: IngredientResolver) -> None:
    store.ingredients.fail_reads = True  # pyright: ignore[reportAttributeAccessIssue]
    with pytest.raises(StoreDown):
        await resolver.resolve("tomato", "en")


@pytest.mark.asyncio
async def test_misspelt_plural_finds_existing_ingredient(store: Store, resolver: IngredientResolver) -> None:
    tomato = await store.ingredients.create(singular_name="tomato", plural_name="tomatoes")

    got = await resolver.resolve("tomatos", "en")

    assert got == tomato.id
    assert len(await store.ingredients.all()) == 1


@pytest.mark.asyncio
async def test_translation_singularizes_onto_existing_ingredient(
    store: Store, resolver: IngredientResolver, fake_translator: FakeTranslator
) -> None:
    tomato = await store.ingredients.create(singular_name="tomato", plural_name="tomatoes")
    fake_translator.dictionary[("Paradeiser", "en")] = "tomatos"

    got = await resolver.resolve("Paradeiser", "de")

    assert got == tomato.id
    assert len(await store.ingredients.all()) == 1
    ingredient = await store.ingredients.get(tomato.id)
    assert ingredient.translated_names["de"].singular_name == "Paradeiser"
