import pytest

from catalogue.repository import Store
from catalogue.resolver import IngredientResolver
from catalogue.translations import TranslationCache
from catalogue.translator import TranslationService
from tests.fakes import FakeTranslator, in_memory_store


@pytest.fixture
def store() -> Store:
    return in_memory_store()


@pytest.fixture
def fake_translator() -> FakeTranslator:
    return FakeTranslator()


@pytest.fixture
def translator(fake_translator: FakeTranslator) -> TranslationService:
    return TranslationService(fake_translator)


@pytest.fixture
def resolver(store: Store, translator: TranslationService) -> IngredientResolver:
    return IngredientResolver(ingredients=store.ingredients, translator=translator)


@pytest.fixture
def cache(store: Store, translator: TranslationService) -> TranslationCache:
    return TranslationCache(store=store, translator=translator)
