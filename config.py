from enum import Enum

from pydantic_settings import BaseSettings


class Env(Enum):
    local = "local"
    dev = "dev"
    prod = "prod"


class TranslatorKind(Enum):
    deepl = "deepl"
    openai = "openai"


class Config(BaseSettings):
    env: Env = Env.local
    db_url: str = "sqlite+aiosqlite:///catalogue.db"
    log_level: str = "INFO"
    default_language: str = "en"
    translator: TranslatorKind = TranslatorKind.deepl
    deepl_api_key: str | None = None
    deepl_url: str = "https://api-free.deepl.com/v2/translate"
    openai_model: str = "gpt-4o-mini"
    translation_timeout: float = 20
    # Languages whose translated ingredient names keep their capitalization.
    preserve_case_languages: list[str] = ["de"]
