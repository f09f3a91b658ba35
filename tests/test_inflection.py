import pytest
from jsonapi_view.inflection import inflect_name, inflect_type, pluralize, same_name, underscore


@pytest.mark.parametrize(
    "style, expected",
    [
        ("dasherize", "national-capitals"),
        ("underscore", "national_capitals"),
        ("camelize", "NationalCapitals"),
        ("variable", "nationalCapitals"),
        ("none", "national_capitals"),
    ],
)
def test_inflect_type(style: str, expected: str) -> None:
    assert inflect_type("national_capitals", style) == expected


def test_inflect_type_pluralizes() -> None:
    assert inflect_type("national_capital") == "national-capitals"
    assert inflect_type("NationalCapital", "underscore") == "national_capitals"
    assert inflect_type("countries") == "countries"
    # names are used as is without inflection
    assert inflect_type("NationalCapital", "none") == "NationalCapital"


def test_pluralize() -> None:
    assert pluralize("country") == "countries"
    assert pluralize("currencies") == "currencies"
    assert pluralize("national_capital") == "national_capitals"


def test_member_names() -> None:
    assert inflect_name("dummy_counter") == "dummy-counter"
    assert inflect_name("dummy_counter", "variable") == "dummyCounter"
    assert inflect_name("dummy_counter", "none") == "dummy_counter"
    assert underscore("dummyCounter") == "dummy_counter"


def test_same_name() -> None:
    assert same_name("national_capital", "national-capital")
    assert same_name("national_capital", "nationalCapital")
    assert not same_name("national_capital", "national_capitals")
