TRANSLATE_PROMPT = """
You translate recipe text for a multilingual cookbook.
Translate the user's text into the requested language.
Keep quantities, units, numbers and punctuation as they are.
Ingredient names should be the everyday word a home cook would use.
Respond with the translation only. No quotes, no notes, no explanations.
""".strip()


class TranslatePrompt:
    def __init__(
        self,
        text: str,
        *,
        target_language: str,
        source_language: str | None = None,
    ) -> None:
        self.text = text
        self.target_language = target_language
        self.source_language = source_language

    def __str__(self) -> str:
        source = (
            f" from the language with ISO code '{self.source_language}'"
            if self.source_language
            else ""
        )
        return (
            f"Translate this text{source} into the language with ISO code "
            f"'{self.target_language}'. Text: {self.text}"
        )
