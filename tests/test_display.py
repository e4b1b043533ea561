import pytest

from catalogue.display import UNKNOWN_NAME, pick_form, resolve_display_name
from catalogue.models import Ingredient, NamePair


def flour() -> Ingredient:
    return Ingredient(
        id="flour",
        singular_name="flour",
        plural_name="flours",
        translated_names={"de": NamePair(singular_name="Mehl", plural_name="Mehle")},
    )


@pytest.mark.parametrize(
    "language,is_plural,expected",
    (
        ("de", False, "Mehl"),
        ("de", True, "Mehle"),
        ("en", False, "flour"),
        ("en", True, "flours"),
    ),
)
def test_resolve_display_name(language: str, is_plural: bool, expected: str) -> None:
    got = resolve_display_name(flour(), language=language, is_plural=is_plural)
    assert got == expected


def test_override_wins() -> None:
    got = resolve_display_name(flour(), language="de", is_plural=True, override="Dinkelmehl")
    assert got == "Dinkelmehl"


def test_blank_override_ignored() -> None:
    got = resolve_display_name(flour(), language="de", is_plural=False, override="  ")
    assert got == "Mehl"


def test_stored_names_win_over_translated() -> None:
    translated = NamePair(singular_name="Weizenmehl", plural_name="Weizenmehle")
    got = resolve_display_name(flour(), language="de", is_plural=False, translated=translated)
    assert got == "Mehl"


def test_translated_used_when_nothing_stored() -> None:
    translated = NamePair(singular_name="farine", plural_name="farines")
    got = resolve_display_name(flour(), language="fr", is_plural=True, translated=translated)
    assert got == "farines"


def test_nothing_known() -> None:
    assert resolve_display_name(flour(), language="fr", is_plural=False) is None


def test_same_inputs_same_output() -> None:
    ingredient = flour()
    first = resolve_display_name(ingredient, language="de", is_plural=True)
    second = resolve_display_name(ingredient, language="de", is_plural=True)
    assert first == second == "Mehle"


@pytest.mark.parametrize(
    "names,is_plural,expected",
    (
        (NamePair(singular_name="egg", plural_name=""), True, "egg"),
        (NamePair(singular_name="", plural_name="eggs"), False, "eggs"),
        (NamePair(singular_name="", plural_name=""), False, UNKNOWN_NAME),
    ),
)
def test_pick_form_falls_back(names: NamePair, is_plural: bool, expected: str) -> None:
    assert pick_form(names, is_plural) == expected


def test_legacy_string_name() -> None:
    assert NamePair.from_value("Mehl") == NamePair(singular_name="Mehl", plural_name="Mehl")
