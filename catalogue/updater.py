import asyncio
import logging

from catalogue.models import LanguageCode, RecipeText
from catalogue.repository import RecipeStore
from catalogue.text import is_url
from catalogue.translator import TranslationService


logger = logging.getLogger(__name__)


async def retranslate_fields(
    cached: RecipeText,
    new: RecipeText,
    changed: set[str],
    *,
    language: LanguageCode,
    source_language: LanguageCode,
    translator: TranslationService,
) -> RecipeText:
    """`cached` with every field in `changed` translated again from `new`.

    A field that fails to translate is dropped from the slot, which makes the
    slot incomplete so the next full view refreshes it.
    """
    updated = cached.copy()
    for field in sorted(changed - {"instructions", "source"}):
        setattr(
            updated,
            field,
            await translator.try_translate(
                getattr(new, field) or "", language, source_language=source_language
            ),
        )

    if "source" in changed:
        source = new.source or ""
        updated.source = (
            source
            if is_url(source)
            else await translator.try_translate(source, language, source_language=source_language)
        )

    if "instructions" in changed:
        results = await translator.translate_many(
            list(new.instructions or []), language, source_language=source_language
        )
        if any(r is None for r in results):
            updated.instructions = None
        else:
            updated.instructions = [r for r in results if r is not None]

    return updated


async def update_recipe_translations(
    recipe_id: str,
    old: RecipeText,
    new: RecipeText,
    *,
    source_language: LanguageCode,
    recipes: RecipeStore,
    translator: TranslationService,
) -> None:
    """Keep every cached language current after an edit.

    Only fields whose source value changed are translated again, the rest are
    carried forward. Never raises, a failure here must not fail the save.
    """
    try:
        changed = old.changed_fields(new)
        if not changed:
            return

        translations = await recipes.translations(recipe_id)
        if not translations:
            return

        languages = list(translations)
        coros = [
            retranslate_fields(
                translations[language],
                new,
                changed,
                language=language,
                source_language=source_language,
                translator=translator,
            )
            for language in languages
        ]
        updated = await asyncio.gather(*coros)
        await recipes.set_translations(recipe_id, dict(zip(languages, updated)))
        logger.info(
            "Retranslated %s of recipe %s into %s.",
            ", ".join(sorted(changed)),
            recipe_id,
            ", ".join(languages),
        )
    except Exception:
        logger.exception("Could not update the translations of recipe %s.", recipe_id)
