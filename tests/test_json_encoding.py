import datetime
import decimal
import uuid

import pytest
from jsonapi_view.errors import ConfigurationError
from jsonapi_view.json_encoder import dumps
from jsonapi_view.options import JsonOption, PresentationOptions, compute_json_flags


@pytest.mark.parametrize(
    "json_options, debug_pretty_print, debug, expected",
    [
        ([2, 8], True, True, 138),
        ([2, 8], True, False, 10),
        ([2, 8], False, True, 10),
        (False, True, True, 128),
        (False, False, True, 0),
        (None, True, False, 0),
        (64, True, False, 64),
    ],
)
def test_compute_json_flags(json_options, debug_pretty_print, debug, expected) -> None:
    assert compute_json_flags(json_options, debug_pretty_print, debug) == expected


def test_options_json_flags() -> None:
    options = PresentationOptions(json_options=[JsonOption.HEX_AMP, JsonOption.HEX_QUOT], debug=True)
    assert options.json_flags == 138
    assert options.include == ()


def test_invalid_inflection() -> None:
    with pytest.raises(ConfigurationError):
        PresentationOptions(inflect="shout")


def test_slashes_are_escaped_by_default() -> None:
    assert dumps({"links": {"self": "/countries/1"}}) == '{"links":{"self":"\\/countries\\/1"}}'
    assert dumps({"links": {"self": "/countries/1"}}, JsonOption.UNESCAPED_SLASHES) == '{"links":{"self":"/countries/1"}}'


def test_hex_flags() -> None:
    text = dumps({"name": "<a href='x'>\"&\"</a>"}, JsonOption.HEX_TAG | JsonOption.HEX_APOS | JsonOption.HEX_QUOT | JsonOption.HEX_AMP)
    assert text == '{"name":"\\u003Ca href=\\u0027x\\u0027\\u003E\\u0022\\u0026\\u0022\\u003C\\/a\\u003E"}'


def test_quotes_without_hex_quot() -> None:
    assert dumps({"name": 'say "hi"'}) == '{"name":"say \\"hi\\""}'


def test_unicode() -> None:
    assert dumps({"name": "Bălgarija"}) == '{"name":"B\\u0103lgarija"}'
    assert dumps({"name": "Bălgarija"}, JsonOption.UNESCAPED_UNICODE) == '{"name":"Bălgarija"}'


def test_pretty_print() -> None:
    text = dumps({"data": {"id": "1"}}, JsonOption.PRETTY_PRINT)
    assert text == '{\n    "data": {\n        "id": "1"\n    }\n}'


def test_number_flags() -> None:
    assert dumps({"value": 10.0}) == '{"value":10}'
    assert dumps({"value": 10.0}, JsonOption.PRESERVE_ZERO_FRACTION) == '{"value":10.0}'
    assert dumps({"value": "12"}, JsonOption.NUMERIC_CHECK) == '{"value":12}'
    assert dumps({"value": "1.5"}, JsonOption.NUMERIC_CHECK) == '{"value":1.5}'
    assert dumps({"value": "NL"}, JsonOption.NUMERIC_CHECK) == '{"value":"NL"}'


def test_force_object() -> None:
    assert dumps({"list": ["a", "b"]}, JsonOption.FORCE_OBJECT) == '{"list":{"0":"a","1":"b"}}'


def test_non_json_values() -> None:
    value_id = uuid.UUID("12345678123456781234567812345678")
    document = {
        "date": datetime.date(2020, 1, 2),
        "datetime": datetime.datetime(2020, 1, 2, 3, 4, 5),
        "price": decimal.Decimal("1.5"),
        "uuid": value_id,
        "tags": {"a"},
    }
    assert dumps(document, JsonOption.UNESCAPED_SLASHES) == (
        '{"date":"2020-01-02","datetime":"2020-01-02 03:04:05","price":1.5,'
        '"uuid":"12345678-1234-5678-1234-567812345678","tags":["a"]}'
    )


def test_options_accept_csv_strings() -> None:
    options = PresentationOptions(include="currency, cultures.country", field_sets={"countries": "code,name", "currencies": []})
    assert options.include == ("currency", "cultures.country")
    assert options.field_sets["countries"] == ("code", "name")
    assert options.field_sets["currencies"] == ()
