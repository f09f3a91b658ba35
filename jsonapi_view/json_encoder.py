# jsonapi document to json encoding
#
# The output has to match documents generated with the PHP json_encode() flags
# (cfr. options.JsonOption), eg. slashes are escaped unless UNESCAPED_SLASHES is set:
#     {"links":{"self":"\/countries\/1"}}
#
import datetime
import decimal
import enum
import json
import re
from uuid import UUID
import jsonapi_view
from .config import is_debug
from .options import JsonOption
from typing import Any

# json string tokens in the json.dumps() output
_STRING_TOKEN = re.compile(r'"(?:[^"\\]|\\.)*"')
# escape sequences and characters that may have to be escaped inside a string token
_ESCAPABLE = re.compile(r"\\.|[/<>&']")
_NUMERIC = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")


class JsonApiJSONEncoder(json.JSONEncoder):
    """
    JSON encoding for common non-json types found in record attributes
    """

    # pylint: disable=too-many-return-statements,method-hidden
    def default(self, obj):
        """
        override the default json encoding
        :param obj: object to be encoded
        :return: encoded/serialized object
        """
        if isinstance(obj, datetime.timedelta):
            return str(obj)
        if isinstance(obj, datetime.datetime):
            return obj.isoformat(" ")
        if isinstance(obj, (datetime.date, datetime.time)):
            return obj.isoformat()
        if isinstance(obj, (set, frozenset)):
            return list(obj)
        if isinstance(obj, UUID):
            return str(obj)
        if isinstance(obj, enum.Enum):
            return obj.value
        if isinstance(obj, decimal.Decimal):
            return float(obj)
        if isinstance(obj, bytes):
            if obj == b"":
                return ""
            jsonapi_view.log.debug("JsonApiJSONEncoder: serializing bytes obj")
            return obj.hex()
        if hasattr(obj, "items") and callable(obj.items):
            # read-only mappings, eg. MappingProxyType
            return dict(obj.items())

        if not is_debug():  # pragma: no cover
            jsonapi_view.log.warning(f'JSON Encoding Error: Unknown object type "{type(obj)}" for {obj}')
            return str(obj)

        return self.ghetto_encode(obj)

    @staticmethod
    def ghetto_encode(obj):  # pragma: no cover
        """
        if everything else failed, try to encode the public obj attributes
        i.e. those attributes without a _ prefix
        :param obj: object to be encoded
        :return: encoded/serialized object
        """
        try:
            result = {}
            for k, v in vars(obj).items():
                if not k.startswith("_"):
                    if isinstance(v, (int, float)) or v is None:
                        result[k] = v
                    else:
                        result[k] = str(v)
        except TypeError:
            result = str(obj)
        return result


def _prepare(value: Any, flags: int, encoder: JsonApiJSONEncoder) -> Any:
    """
    Convert `value` to plain json types, applying the flags that affect values rather than the formatting
    """
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, str):
        if flags & JsonOption.NUMERIC_CHECK and _NUMERIC.match(value):
            number = float(value)
            return int(number) if number.is_integer() and "." not in value and "e" not in value.lower() else number
        return value
    if isinstance(value, int):
        return int(value)
    if isinstance(value, float):
        if value.is_integer() and not flags & JsonOption.PRESERVE_ZERO_FRACTION:
            return int(value)
        return value
    if isinstance(value, dict):
        return {str(k): _prepare(v, flags, encoder) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        items = [_prepare(v, flags, encoder) for v in value]
        if flags & JsonOption.FORCE_OBJECT:
            return {str(i): v for i, v in enumerate(items)}
        return items
    return _prepare(encoder.default(value), flags, encoder)


def _escape_strings(text: str, flags: int) -> str:
    """
    Escape the characters inside the json string tokens of `text` according to `flags`
    """
    replacements = {}
    if not flags & JsonOption.UNESCAPED_SLASHES:
        replacements["/"] = "\\/"
    if flags & JsonOption.HEX_TAG:
        replacements["<"] = "\\u003C"
        replacements[">"] = "\\u003E"
    if flags & JsonOption.HEX_AMP:
        replacements["&"] = "\\u0026"
    if flags & JsonOption.HEX_APOS:
        replacements["'"] = "\\u0027"
    if flags & JsonOption.HEX_QUOT:
        replacements['\\"'] = "\\u0022"
    if not replacements:
        return text

    def escape_part(match):
        part = match.group(0)
        return replacements.get(part, part)

    def escape_token(match):
        return '"' + _ESCAPABLE.sub(escape_part, match.group(0)[1:-1]) + '"'

    return _STRING_TOKEN.sub(escape_token, text)


def dumps(document: Any, flags: int = 0) -> str:
    """
    :param document: jsonapi document (dict)
    :param flags: bitwise combination of `JsonOption` flags
    :return: json string
    """
    encoder = JsonApiJSONEncoder()
    prepared = _prepare(document, flags, encoder)
    if flags & JsonOption.PRETTY_PRINT:
        text = json.dumps(prepared, indent=4, ensure_ascii=not flags & JsonOption.UNESCAPED_UNICODE)
    else:
        text = json.dumps(prepared, separators=(",", ":"), ensure_ascii=not flags & JsonOption.UNESCAPED_UNICODE)
    return _escape_strings(text, flags)
