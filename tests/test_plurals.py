import pytest

from catalogue.models import NamePair
from catalogue.plurals import ENGLISH, SuffixPlurals, plural_rule


@pytest.mark.parametrize(
    "text,singular,plural",
    (
        ("tomato", "tomato", "tomatoes"),
        ("tomatoes", "tomato", "tomatoes"),
        ("egg", "egg", "eggs"),
        ("eggs", "egg", "eggs"),
        ("flour", "flour", "flours"),
        ("cherry", "cherry", "cherries"),
    ),
)
def test_english_forms(text: str, singular: str, plural: str) -> None:
    got = ENGLISH.forms(text)
    assert got == NamePair(singular_name=singular, plural_name=plural)


@pytest.mark.parametrize(
    "language,singular,expected",
    (
        ("de", "Tomate", "Tomaten"),
        ("de", "Zwiebel", "Zwiebel"),
        ("de", "Mehl", "Mehle"),
        ("de", "grüne Bohne", "grüne Bohnen"),
        ("fr", "pomme", "pommes"),
        ("fr", "poireau", "poireaux"),
        ("fr", "noix", "noix"),
        ("es", "tomate", "tomates"),
        ("es", "nuez", "nueces"),
        ("it", "pomodoro", "pomodori"),
        ("it", "carota", "carote"),
        ("nl", "ui", "uien"),
    ),
)
def test_suffix_plurals(language: str, singular: str, expected: str) -> None:
    assert plural_rule(language).plural(singular) == expected


def test_unregistered_language_uses_english() -> None:
    assert plural_rule("sv") is ENGLISH


def test_suffix_plurals_keeps_case_of_stem() -> None:
    rule = SuffixPlurals([("e", "en")], default_suffix="s")
    assert rule.plural("Tomate") == "Tomaten"
    assert rule.plural("Kiwi") == "Kiwis"
    assert rule.plural("") == ""
