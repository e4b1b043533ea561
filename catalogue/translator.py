"""The translation service.

Providers implement `Translator` and are free to raise. Everything else in the
package talks to `TranslationService`, which never does.
"""

import asyncio
import logging
from typing import Protocol

import httpx
import openai

from catalogue.aopenai import openai_client_factory, quick_chat
from catalogue.models import LanguageCode
from catalogue.prompts import TRANSLATE_PROMPT, TranslatePrompt
from catalogue.text import is_blank
from config import Config, TranslatorKind


logger = logging.getLogger(__name__)


# DeepL rejects the bare codes for these as targets.
DEEPL_TARGET_CODES = {"en": "EN-GB", "pt": "PT-PT"}


class TranslationError(Exception):
    pass


class Translator(Protocol):
    async def translate(
        self,
        text: str,
        target_language: LanguageCode,
        source_language: LanguageCode | None = None,
    ) -> str:
        ...


def deepl_client_factory(token: str | None, *, timeout: float = 20) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        headers={"Authorization": f"DeepL-Auth-Key {token}"},
        timeout=timeout,
    )


def deepl_target(language: LanguageCode) -> str:
    return DEEPL_TARGET_CODES.get(language.lower(), language.upper())


class DeepLTranslator:
    def __init__(
        self,
        *,
        token: str | None,
        url: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 20,
    ) -> None:
        self.token = token
        self.url = url
        self.client = deepl_client_factory(token, timeout=timeout) if client is None else client
        if not token:
            logger.warning("No DeepL API key configured, every translation will fall back.")

    async def translate(
        self,
        text: str,
        target_language: LanguageCode,
        source_language: LanguageCode | None = None,
    ) -> str:
        if not self.token:
            raise TranslationError("No DeepL API key.")

        data = {"text": text.strip(), "target_lang": deepl_target(target_language)}
        if source_language and source_language != "auto":
            data["source_lang"] = source_language.upper()

        resp = await self.client.post(self.url, data=data)
        resp.raise_for_status()
        payload = resp.json()
        try:
            return payload["translations"][0]["text"].strip()
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            raise TranslationError(f"Malformed DeepL response. {payload}") from e

    async def close(self) -> None:
        await self.client.aclose()


class OpenAITranslator:
    def __init__(
        self,
        *,
        model: str,
        openai_client: openai.AsyncClient | None = None,
    ) -> None:
        self.openai_client = openai_client_factory() if openai_client is None else openai_client
        self.model = model

    async def translate(
        self,
        text: str,
        target_language: LanguageCode,
        source_language: LanguageCode | None = None,
    ) -> str:
        prompt = TranslatePrompt(
            text.strip(),
            target_language=target_language,
            source_language=source_language,
        )
        ans = await quick_chat(
            str(prompt),
            openai_client=self.openai_client,
            model=self.model,
            system=TRANSLATE_PROMPT,
        )
        if not ans:
            raise TranslationError(f"Empty translation for {text!r}.")
        return ans

    async def close(self) -> None:
        await self.openai_client.close()


def translator_factory(config: Config) -> DeepLTranslator | OpenAITranslator:
    match config.translator:
        case TranslatorKind.deepl:
            return DeepLTranslator(
                token=config.deepl_api_key,
                url=config.deepl_url,
                timeout=config.translation_timeout,
            )
        case TranslatorKind.openai:
            return OpenAITranslator(
                openai_client=openai_client_factory(timeout=config.translation_timeout),
                model=config.openai_model,
            )
        case _:
            raise ValueError(f"Unsupported translator: {config.translator}")


class TranslationService:
    """Never raises. Blank text never reaches the provider."""

    def __init__(self, translator: Translator) -> None:
        self.translator = translator

    async def try_translate(
        self,
        text: str,
        target_language: LanguageCode,
        source_language: LanguageCode | None = None,
    ) -> str | None:
        """The translation, or `None` if the provider failed."""
        if is_blank(text) or source_language == target_language:
            return text

        try:
            translated = await self.translator.translate(text, target_language, source_language)
        except Exception:
            logger.warning(
                "Translation to %s failed for %r.", target_language, text, exc_info=True
            )
            return None

        if is_blank(translated):
            logger.warning("Empty translation to %s for %r.", target_language, text)
            return None
        return translated

    async def translate(
        self,
        text: str,
        target_language: LanguageCode,
        source_language: LanguageCode | None = None,
    ) -> str:
        translated = await self.try_translate(text, target_language, source_language)
        return text if translated is None else translated

    async def translate_many(
        self,
        texts: list[str],
        target_language: LanguageCode,
        source_language: LanguageCode | None = None,
    ) -> list[str | None]:
        """Concurrent, results in the same slots as `texts`."""
        coros = [self.try_translate(t, target_language, source_language) for t in texts]
        return list(await asyncio.gather(*coros))
