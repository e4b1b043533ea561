import pytest

from catalogue.text import (
    CaseFolding,
    ensure_terminal_punctuation,
    is_url,
    language_from_header,
    normalise_language,
    normalise_name,
)


@pytest.mark.parametrize(
    "text,expected",
    (
        ("https://www.bbcgoodfood.com/recipes/lasagne", True),
        ("  http://example.com/bread  ", True),
        ("www.example.com/bread", True),
        ("Grandma's notebook", False),
        ("See https://example.com for more", False),
        ("", False),
        (None, False),
    ),
)
def test_is_url(text: str | None, expected: bool) -> None:
    assert is_url(text) is expected


@pytest.mark.parametrize(
    "name,expected",
    (
        ("Tomato", "tomato"),
        ("  TOMATO ", "tomato"),
        ("red   onion", "red onion"),
    ),
)
def test_normalise_name(name: str, expected: str) -> None:
    assert normalise_name(name) == expected


@pytest.mark.parametrize(
    "code,expected",
    (
        ("de-DE", "de"),
        ("EN_au", "en"),
        ("fr", "fr"),
        ("", "en"),
        (None, "en"),
    ),
)
def test_normalise_language(code: str | None, expected: str) -> None:
    assert normalise_language(code) == expected


def test_language_from_header() -> None:
    assert language_from_header("fr-FR,fr;q=0.9,en;q=0.8") == "fr"
    assert language_from_header("de;q=0.9") == "de"
    assert language_from_header(None, "es") == "es"


@pytest.mark.parametrize(
    "line,expected",
    (
        ("Mix the flour", "Mix the flour."),
        ("Bake!", "Bake!"),
        ("Serve (warm)", "Serve (warm)"),
        ("Rest 10 min.  ", "Rest 10 min.  "),
        ("", ""),
    ),
)
def test_ensure_terminal_punctuation(line: str, expected: str) -> None:
    assert ensure_terminal_punctuation(line) == expected


def test_case_folding() -> None:
    folding = CaseFolding()
    assert folding.fold("Tomate", "de") == "Tomate"
    assert folding.fold("Tomate", "fr") == "tomate"
    assert folding.fold("  Pomme  de terre ", "fr") == "pomme de terre"


def test_case_folding_configured() -> None:
    folding = CaseFolding(["de-DE", "nl"])
    assert folding.fold("Ui", "nl") == "Ui"
    assert folding.fold("Mehl", "de") == "Mehl"
    assert folding.fold("Farine", "fr") == "farine"
