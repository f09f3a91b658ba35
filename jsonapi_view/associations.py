"""
Association graph: the relationships that were contained (eager loaded) by a query

Contain paths are dot-separated relationship names, eg.

    ["currency", "national_capital.countries"]

or the equivalent nested mapping

    {"currency": {}, "national_capital": {"countries": {}}}

They're resolved into a graph:

    {
        "currency": {"association": <Association belongsTo currency -> Currency>, "children": {}},
        "national_capital": {
            "association": <Association belongsTo national_capital -> NationalCapital>,
            "children": {"countries": {"association": <...>, "children": {}}},
        },
    }
"""
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union
from sqlalchemy.orm import selectinload
import jsonapi_view
from .errors import AssociationResolutionError
from .repository import Repository, to_repository

Contain = Union[None, str, Iterable[str], Mapping[str, Any]]


def parse_contain(contain: Contain) -> Dict[str, dict]:
    """
    :param contain: contain paths (csv string, list of dot-separated paths or nested mapping)
    :return: nested dict of relationship names
    """
    result: Dict[str, dict] = {}
    if not contain:
        return result
    if isinstance(contain, str):
        contain = [inc for inc in contain.split(",") if inc]
    if isinstance(contain, Mapping):
        for name, children in contain.items():
            result.setdefault(name, {}).update(parse_contain(children))
        return result
    for path in contain:
        if isinstance(path, Mapping):
            for name, children in parse_contain(path).items():
                result.setdefault(name, {}).update(children)
            continue
        node = result
        for name in str(path).split("."):
            if name:
                node = node.setdefault(name.strip(), {})
    return result


def get_contained_associations(repository: Any, contain: Contain, status_code: Optional[int] = None) -> Dict[str, dict]:
    """
    :param repository: root repository (or mapped class)
    :param contain: contain paths
    :param status_code: status code of the AssociationResolutionError, eg. 400 for client supplied paths
    :return: association graph
    """
    visited_paths = set()

    def walk(repo: Repository, tree: Mapping[str, dict], path: str) -> Dict[str, dict]:
        # merge the names that resolve to the same association, eg. "national_capital" and "national-capital"
        resolved = {}
        for name, children in tree.items():
            association = repo.get_association(name)
            if association is None:
                raise AssociationResolutionError(f'Association "{name}" not found in repository "{repo.name}"', status_code)
            resolved.setdefault(association.name, (association, {}))[1].update(children)

        result = {}
        for assoc_name, (association, children) in resolved.items():
            assoc_path = f"{path}.{assoc_name}" if path else assoc_name
            if assoc_path in visited_paths:  # pragma: no cover
                continue
            visited_paths.add(assoc_path)
            jsonapi_view.log.debug(f"Contained association {assoc_path}")
            target = to_repository(association.target)
            result[assoc_name] = {"association": association, "children": walk(target, children, assoc_path)}
        return result

    return walk(to_repository(repository), parse_contain(contain), "")


def get_repository_list(repository: Any, associations: Mapping[str, dict]) -> Dict[str, Repository]:
    """
    :param repository: root repository (or mapped class)
    :param associations: association graph
    :return: ordered dict of repository name => repository, without duplicates, the root comes first
    """
    root = to_repository(repository)
    result = {root.name: root}

    def walk(graph: Mapping[str, dict]) -> None:
        for node in graph.values():
            target = to_repository(node["association"].target)
            result.setdefault(target.name, target)
            walk(node["children"])

    walk(associations)
    return result


def get_include_paths(associations: Mapping[str, dict]) -> List[str]:
    """
    :param associations: association graph
    :return: the dot-separated paths of all nodes in the graph
    """
    result = []

    def walk(graph: Mapping[str, dict], path: str) -> None:
        for name, node in graph.items():
            node_path = f"{path}.{name}" if path else name
            result.append(node_path)
            walk(node["children"], node_path)

    walk(associations, "")
    return result


def contain_options(model: Any, contain: Contain) -> list:
    """
    Create the query loader options that eager load the contained relationships, eg.

        query = db.session.query(Country).options(*contain_options(Country, ["currency", "national_capital.countries"]))

    :param model: mapped class that will be queried
    :param contain: contain paths
    :return: list of sqlalchemy loader options
    """
    result = []

    def walk(cls: Any, graph: Mapping[str, dict], parent_option) -> None:
        for name, node in graph.items():
            rel_attr = getattr(cls, name)
            option = parent_option.selectinload(rel_attr) if parent_option is not None else selectinload(rel_attr)
            if node["children"]:
                walk(node["association"].target, node["children"], option)
            else:
                result.append(option)

    walk(model, get_contained_associations(model, contain), None)
    return result
