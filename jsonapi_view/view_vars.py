"""
View variables: the input of the renderer

The view variables are a mapping of names to values:
- special variables: names starting with an underscore configure the rendering, eg. "_meta", "_include"
- "query_log": the query log, rendered in the top-level "query" node
- domain variables: everything else, one of these holds the data that will be serialized

The `_serialize` special variable selects the domain variable holding the data:
- True (default): the first domain variable
- "countries": the "countries" variable
- ["countries", "currencies"]: only the first name is used, "countries"
- False: no data, used for meta-only documents

`RenderContext.from_view_vars` assembles all of this into one request-scoped structure
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple
from sqlalchemy.orm import Query
import jsonapi_view
from .associations import get_contained_associations, get_repository_list
from .errors import ConfigurationError
from .jsonapi_primitives import PaginationInfo
from .options import PresentationOptions
from .pagination import to_pagination_info
from .repository import GENERIC_RECORD_CLASSES, Repository, to_repository

SPECIAL_VAR_PREFIX = "_"
QUERY_LOG_VAR = "query_log"


def is_special_var(name: str) -> bool:
    return isinstance(name, str) and name.startswith(SPECIAL_VAR_PREFIX)


def get_special_vars(view_vars: Mapping[str, Any]) -> List[str]:
    """
    :param view_vars: view variables
    :return: the names of the special variables
    """
    return [name for name in view_vars if is_special_var(name)]


def split_view_vars(view_vars: Mapping[str, Any]) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """
    :param view_vars: view variables
    :return: special variables, domain variables
    """
    special = {name: value for name, value in view_vars.items() if is_special_var(name)}
    domain = {name: value for name, value in view_vars.items() if not is_special_var(name)}
    return special, domain


def get_data_to_serialize(view_vars: Mapping[str, Any], serialize: Any = True) -> Any:
    """
    :param view_vars: view variables
    :param serialize: the `_serialize` directive
    :return: the data to be serialized or None
    """
    if serialize is False:
        return None

    if serialize is True or serialize is None:
        _, domain = split_view_vars(view_vars)
        domain.pop(QUERY_LOG_VAR, None)
        if not domain:
            return None
        return next(iter(domain.values()))

    if isinstance(serialize, (list, tuple)):
        # Only the first name is used, the other names are ignored
        if not serialize:
            return None
        serialize = serialize[0]

    if not isinstance(serialize, str):
        raise ConfigurationError(
            'Assigning an object to "_serialize" is not supported, '
            'assign the object to its own variable and assign "_serialize" = True instead.'
        )

    return view_vars.get(serialize)


def is_collection(data: Any) -> bool:
    """
    :return: whether data is a collection of records rather than a single record
    """
    if isinstance(data, (str, bytes, Mapping)):
        return False
    if isinstance(data, Query):
        return True
    if isinstance(data, GENERIC_RECORD_CLASSES) or (isinstance(data, tuple) and hasattr(data, "_fields")):
        # sqlalchemy Row (or namedtuple) is a single record
        return False
    return hasattr(data, "__iter__")


@dataclass(frozen=True)
class RenderContext:
    """
    Everything needed to render one document
    """

    options: PresentationOptions
    data: Any = None
    pagination: Optional[PaginationInfo] = None
    query_log: Any = None
    repositories: Dict[str, Repository] = field(default_factory=dict)
    associations: Dict[str, dict] = field(default_factory=dict)
    schemas: Dict[type, type] = field(default_factory=dict)

    @classmethod
    def from_view_vars(cls, view_vars: Mapping[str, Any], debug: Optional[bool] = None) -> "RenderContext":
        """
        :param view_vars: view variables
        :param debug: environment mode, defaults to the "_debug" view variable or config.is_debug()
        :return: RenderContext
        """
        special, _ = split_view_vars(view_vars)
        options = PresentationOptions.from_view_vars(special, debug=debug)
        data = get_data_to_serialize(view_vars, special.get("_serialize", True))
        if is_collection(data):
            # resultsets are consumed once
            data = list(data)

        repositories = {}
        associations = special.get("_associations") or {}
        if special.get("_repositories"):
            sources = special["_repositories"]
            if isinstance(sources, Mapping):
                sources = sources.values()
            for source in sources:
                repository = to_repository(source)
                repositories.setdefault(repository.name, repository)
            root = next(iter(repositories.values()))
            if not associations and special.get("_contain") and not root.is_generic:
                associations = get_contained_associations(root, special["_contain"])
                for name, repository in get_repository_list(root, associations).items():
                    repositories.setdefault(name, repository)
        elif data is not None:
            root = _root_record_class(data)
            if root is not None:
                associations = associations or get_contained_associations(root, special.get("_contain"))
                repositories = get_repository_list(root, associations)

        jsonapi_view.log.debug(f"Render context repositories: {list(repositories)}")
        return cls(
            options=options,
            data=data,
            pagination=to_pagination_info(special.get("_pagination")),
            query_log=view_vars.get(QUERY_LOG_VAR),
            repositories=repositories,
            associations=associations,
            schemas=dict(special.get("_schemas") or {}),
        )


def _root_record_class(data: Any) -> Optional[type]:
    """
    :return: the class of the (first) record in data, None if it has no repository of its own
    """
    record = data
    if isinstance(data, list):
        if not data:
            return None
        record = data[0]
    cls = type(record)
    if isinstance(record, (tuple, Mapping) + GENERIC_RECORD_CLASSES):
        # generic records (Row, dict): the repository has to be passed in "_repositories"
        return None
    return cls
