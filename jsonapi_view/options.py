# Presentation options: the settings of a single encode pass
#
# The options are created from the special view variables (eg. "_meta", "_include")
# and default to the configuration (cfr. config.get_config) when a variable isn't set
#
import enum
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional, Sequence, Tuple, Union
from .config import get_config, is_debug
from .errors import ConfigurationError
from .inflection import INFLECTIONS


class JsonOption(enum.IntFlag):
    """
    JSON encoding flags, the values are compatible with the PHP json_encode() flags
    so existing configurations (eg. [2, 8]) keep working
    """

    HEX_TAG = 1
    HEX_AMP = 2
    HEX_APOS = 4
    HEX_QUOT = 8
    FORCE_OBJECT = 16
    NUMERIC_CHECK = 32
    UNESCAPED_SLASHES = 64
    PRETTY_PRINT = 128
    UNESCAPED_UNICODE = 256
    PRESERVE_ZERO_FRACTION = 1024


def compute_json_flags(json_options: Union[int, Sequence[int], bool, None], debug_pretty_print: bool, debug: bool) -> int:
    """
    :param json_options: base flags: an int, a list of ints or False
    :param debug_pretty_print: whether pretty printing was requested
    :param debug: whether we're running in debug mode, pretty printing is never enabled in production
    :return: bitwise combination of the flags
    """
    flags = 0
    if json_options is None or json_options is False:
        flags = 0
    elif isinstance(json_options, (list, tuple, set, frozenset)):
        for option in json_options:
            flags |= int(option)
    else:
        flags = int(json_options)

    if debug and debug_pretty_print:
        flags |= JsonOption.PRETTY_PRINT

    return int(flags)



def _to_names(names: Union[str, Sequence[str], None]) -> Tuple[str, ...]:
    """
    :param names: list of names or csv string, eg. "currency,cultures.country"
    :return: tuple of names
    """
    if not names:
        return ()
    if isinstance(names, str):
        names = names.split(",")
    return tuple(name.strip() for name in names if name and name.strip())

# view variable name => option name
VIEW_VAR_OPTIONS = {
    "_url_prefix": "url_prefix",
    "_with_jsonapi_version": "with_jsonapi_version",
    "_meta": "meta",
    "_absolute_links": "absolute_links",
    "_jsonapi_belongs_to_links": "jsonapi_belongs_to_links",
    "_include": "include",
    "_field_sets": "field_sets",
    "_json_options": "json_options",
    "_debug_pretty_print": "debug_pretty_print",
    "_inflect": "inflect",
    "_debug": "debug",
    "_base_url": "base_url",
}


@dataclass(frozen=True)
class PresentationOptions:
    """
    Serialization settings, immutable for the duration of one encode
    """

    url_prefix: Optional[str] = None
    with_jsonapi_version: Union[bool, Mapping[str, Any]] = False
    meta: Union[bool, Mapping[str, Any], None] = field(default_factory=dict)
    absolute_links: bool = False
    jsonapi_belongs_to_links: bool = False
    include: Sequence[str] = ()
    field_sets: Mapping[str, Sequence[str]] = field(default_factory=dict)
    json_options: Union[int, Sequence[int], bool, None] = ()
    debug_pretty_print: bool = True
    inflect: str = "dasherize"
    debug: bool = False
    base_url: Optional[str] = None

    def __post_init__(self):
        if self.inflect not in INFLECTIONS:
            raise ConfigurationError(f'Invalid inflection "{self.inflect}", use one of {", ".join(INFLECTIONS)}')
        # freeze the containers so the options can't be changed while encoding
        object.__setattr__(self, "include", _to_names(self.include))
        object.__setattr__(
            self, "field_sets", MappingProxyType({res_type: _to_names(names) for res_type, names in (self.field_sets or {}).items()})
        )
        if isinstance(self.json_options, list):
            object.__setattr__(self, "json_options", tuple(self.json_options))

    @classmethod
    def from_config(cls, **overrides) -> "PresentationOptions":
        """
        :param overrides: option values that take precedence over the configuration
        :return: options with the configured defaults
        """
        defaults = dict(
            url_prefix=get_config("URL_PREFIX"),
            with_jsonapi_version=get_config("WITH_JSONAPI_VERSION"),
            meta=get_config("META"),
            absolute_links=get_config("ABSOLUTE_LINKS"),
            jsonapi_belongs_to_links=get_config("JSONAPI_BELONGS_TO_LINKS"),
            include=get_config("INCLUDE"),
            field_sets=get_config("FIELD_SETS"),
            json_options=get_config("JSON_OPTIONS"),
            debug_pretty_print=get_config("DEBUG_PRETTY_PRINT"),
            inflect=get_config("INFLECT"),
            debug=is_debug(),
            base_url=get_config("BASE_URL"),
        )
        defaults.update(overrides)
        return cls(**defaults)

    @classmethod
    def from_view_vars(cls, special_vars: Mapping[str, Any], **overrides) -> "PresentationOptions":
        """
        :param special_vars: the special (underscored) view variables
        :param overrides: option values that take precedence over the view variables
        :return: options
        """
        values = {opt_name: special_vars[var_name] for var_name, opt_name in VIEW_VAR_OPTIONS.items() if var_name in special_vars}
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.from_config(**values)

    @property
    def json_flags(self) -> int:
        """
        :return: the JSON encoding flags for this encode
        """
        return compute_json_flags(self.json_options, self.debug_pretty_print, self.debug)

