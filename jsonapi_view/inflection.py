"""
    inflection: resource type and member name inflection

    The inflection styles:
    - dasherize: national_capitals, NationalCapitals => national-capitals (default)
    - underscore: NationalCapitals => national_capitals
    - camelize: national_capitals => NationalCapitals
    - variable: national_capitals => nationalCapitals
    - none: the name is used as is
"""
import re
from functools import lru_cache
import inflect

DASHERIZE = "dasherize"
UNDERSCORE = "underscore"
CAMELIZE = "camelize"
VARIABLE = "variable"
NONE = "none"
INFLECTIONS = (DASHERIZE, UNDERSCORE, CAMELIZE, VARIABLE, NONE)

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_inflect_engine = inflect.engine()


def underscore(name: str) -> str:
    """
    NationalCapitals => national_capitals, national-capitals => national_capitals
    """
    return _CAMEL_BOUNDARY.sub("_", name).replace("-", "_").lower()


def dasherize(name: str) -> str:
    return underscore(name).replace("_", "-")


def camelize(name: str) -> str:
    return "".join(part[:1].upper() + part[1:] for part in underscore(name).split("_"))


def variable(name: str) -> str:
    result = camelize(name)
    return result[:1].lower() + result[1:]


@lru_cache(maxsize=256)
def pluralize(name: str) -> str:
    """
    Pluralize the last word of `name`, names that are plural already are returned unchanged
    eg. national_capital => national_capitals, countries => countries
    """
    head, sep, word = name.rpartition("_") if "_" in name else ("", "", name)
    if not word or _inflect_engine.singular_noun(word) is not False:
        # singular_noun() returns False if the word is singular
        return name
    return head + sep + _inflect_engine.plural_noun(word)


def inflect_name(name: str, style: str = DASHERIZE) -> str:
    """
    :param name: member name (attribute or relationship)
    :param style: inflection style
    :return: inflected name
    """
    if style == DASHERIZE:
        return dasherize(name)
    if style == UNDERSCORE:
        return underscore(name)
    if style == CAMELIZE:
        return camelize(name)
    if style == VARIABLE:
        return variable(name)
    return name


def inflect_type(repository_name: str, style: str = DASHERIZE) -> str:
    """
    :param repository_name: name of the repository (table) the records were fetched from
    :param style: inflection style
    :return: jsonapi resource type, the pluralized and inflected repository name
    """
    if style == NONE:
        return repository_name
    return inflect_name(pluralize(underscore(repository_name)), style)


def same_name(name: str, other: str) -> bool:
    """
    Compare names regardless of their inflection, eg. national-capital == national_capital == nationalCapital
    """
    return underscore(name) == underscore(other)
