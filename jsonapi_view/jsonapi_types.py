from typing import Any, TypedDict, Union


class JSONAPIResourceIdentifier(TypedDict):
    type: str
    id: str


class JSONAPIRelationshipObject(TypedDict, total=False):
    links: dict[str, str]
    data: Union[JSONAPIResourceIdentifier, list[JSONAPIResourceIdentifier], None]


class JSONAPIResourceObject(JSONAPIResourceIdentifier, total=False):
    attributes: dict[str, Any]
    relationships: dict[str, JSONAPIRelationshipObject]
    links: dict[str, str]


JSONAPIData = Union[JSONAPIResourceObject, list[JSONAPIResourceObject], None]


class JSONAPIDocument(TypedDict, total=False):
    jsonapi: dict[str, Any]
    meta: dict[str, Any]
    links: dict[str, str]
    data: JSONAPIData
    included: list[JSONAPIResourceObject]
    query: Any
    errors: list[dict[str, Any]]
