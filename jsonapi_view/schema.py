# schema.py: resource schemas
#
# A schema turns a record into the jsonapi resource members:
#     {
#         "type": "countries",
#         "id": "1",
#         "attributes": { ... },
#         "relationships": { ... },
#         "links": {"self": "/countries/1"}
#     }
#
# There are two kinds of schemas:
# - StaticSchema: declared ahead of time for an entity class (cfr. register_schema)
# - DerivedSchema: synthesized from the repository columns and relationships
#
# pylint: disable=protected-access
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Tuple, Type
from urllib.parse import quote, urlencode, urlparse
from flask import has_request_context, request
import jsonapi_view
from .config import get_config
from .errors import AssociationResolutionError, SchemaError
from .inflection import inflect_name, inflect_type
from .options import PresentationOptions
from .repository import BELONGS_TO, GENERIC_RECORD_CLASSES, HAS_MANY, HAS_ONE, Association, Repository, to_repository

DEFAULT_BASE_URL = "http://localhost"


class Relationship(NamedTuple):
    """
    Relationship of a record, as returned by SchemaProvider.get_relationships()
    """

    name: str  # inflected relationship name
    association: Association
    links: Dict[str, str]
    loaded: bool  # whether the related records have been loaded
    related: Any  # related record(s), None if not loaded
    foreign_id: Optional[str]  # id of the related record derived from the foreign key (belongsTo only)


class LinkBuilder:
    """
    Create the resource and relationship urls
    """

    def __init__(self, options: PresentationOptions) -> None:
        self.prefix = (options.url_prefix or "").rstrip("/")
        self.base_url = ""
        if options.absolute_links:
            base_url = options.base_url
            if not base_url and has_request_context():
                base_url = request.host_url
            self.base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        self.resource_fmt = get_config("RESOURCE_URL_FMT")
        self.collection_fmt = get_config("COLLECTION_URL_FMT")
        self.relationship_fmt = get_config("RELATIONSHIP_URL_FMT")

    def _absolute(self, url: str) -> str:
        if self.base_url and not urlparse(url).netloc:
            return self.base_url + url
        return url

    def resource(self, res_type: str, res_id: str) -> str:
        """
        :return: resource url, eg. /countries/1
        """
        return self._absolute(self.resource_fmt.format(self.prefix, res_type, quote(str(res_id), safe="")))

    def collection(self, res_type: str, query: Optional[Dict[str, Any]] = None) -> str:
        """
        :return: collection url, eg. /cultures?country_id=1
        """
        url = self.collection_fmt.format(self.prefix, res_type)
        if query:
            url += "?" + urlencode(query)
        return self._absolute(url)

    def relationship(self, res_type: str, res_id: str, rel_name: str) -> str:
        """
        :return: relationship url, eg. /countries/1/relationships/currency
        """
        return self._absolute(self.relationship_fmt.format(self.prefix, res_type, quote(str(res_id), safe=""), rel_name))


class SchemaProvider:
    """
    Base class of the resource schemas

    Subclasses set (or compute) the resource members:
    - resource_type: jsonapi type, derived from the repository name if not set
    - attribute_names: record attribute names exposed in "attributes"
    - relationship_names: association names exposed in "relationships"
    """

    resource_type: Optional[str] = None
    attribute_names: Tuple[str, ...] = ()
    relationship_names: Tuple[str, ...] = ()

    def __init__(self, repository: Repository, container: "SchemaContainer") -> None:
        self.repository = repository
        self.container = container
        self.options = container.options
        self.links = container.links
        if self.resource_type is None:
            self.resource_type = inflect_type(repository.name, self.options.inflect)

    def member_name(self, name: str) -> str:
        """
        :param name: attribute or relationship name
        :return: the name as it appears in the document
        """
        return inflect_name(name, self.options.inflect)

    def get_id(self, record: Any) -> str:
        return self.repository.get_id(record)

    def get_self_link(self, record: Any) -> str:
        return self.links.resource(self.resource_type, self.get_id(record))

    def get_attributes(self, record: Any) -> Dict[str, Any]:
        """
        :param record: record to be encoded
        :return: dict of inflected attribute names and values
        """
        result = {}
        for name in self.attribute_names:
            key = self.member_name(name)
            if key != name and key in self.attribute_names:
                # don't overwrite an attribute that already has the inflected name
                key = name
            result[key] = getattr(record, name)
        return result

    def get_relationships(self, record: Any) -> List[Relationship]:
        """
        :param record: record to be encoded
        :return: list of Relationship tuples, one per exposed association
        """
        result = []
        for name in self.relationship_names:
            association = self.repository.associations[name]
            member_name = self.member_name(name)
            loaded = self.repository.is_loaded(record, name)
            related = getattr(record, name) if loaded else None
            foreign_id = None
            if association.kind == BELONGS_TO:
                fk_values = [getattr(record, fk) for fk in association.foreign_keys]
                if all(value is not None for value in fk_values):
                    foreign_id = "_".join(str(value) for value in fk_values)
            links = {"self": self.get_relationship_link(record, association, member_name, foreign_id)}
            result.append(Relationship(member_name, association, links, loaded, related, foreign_id))
        return result

    def get_relationship_link(self, record: Any, association: Association, member_name: str, foreign_id: Optional[str]) -> str:
        """
        :return: the relationship "self" link:
        - belongsTo: the related resource (/currencies/1)
          or the relationship (/countries/1/relationships/currency) if jsonapi_belongs_to_links is set
        - hasOne/hasMany: the related collection filtered by the foreign key (/cultures?country_id=1)
        - belongsToMany: the relationship (/countries/1/relationships/languages)
        """
        if association.kind == BELONGS_TO and not self.options.jsonapi_belongs_to_links and foreign_id is not None:
            return self.links.resource(self.container.get_type(association.target), foreign_id)
        if association.kind in (HAS_ONE, HAS_MANY):
            query = {remote: getattr(record, local) for local, remote in zip(association.local_keys, association.remote_keys)}
            return self.links.collection(self.container.get_type(association.target), query)
        return self.links.relationship(self.resource_type, self.get_id(record), member_name)


class StaticSchema(SchemaProvider):
    """
    Explicitly declared schema, eg.

        @register_schema(Country)
        class CountrySchema(StaticSchema):
            resource_type = "nations"
            attribute_names = ("code", "name")
            relationship_names = ("currency",)
    """

    def __init__(self, repository: Repository, container: "SchemaContainer") -> None:
        super().__init__(repository, container)
        for name in self.relationship_names:
            if name not in repository.associations:
                raise AssociationResolutionError(f'Association "{name}" of {type(self).__name__} not found in repository "{repository.name}"')


class DerivedSchema(SchemaProvider):
    """
    Schema synthesized from the repository:
    - attributes: all columns except the primary key and the belongsTo foreign keys
    - relationships: all associations
    """

    def __init__(self, repository: Repository, container: "SchemaContainer") -> None:
        super().__init__(repository, container)
        self.attribute_names = tuple(
            name for name in repository.fields if name not in repository.primary_key and name not in repository.foreign_keys
        )
        self.relationship_names = tuple(repository.associations.keys())


def register_schema(entity_class: type):
    """
    Class decorator to register a StaticSchema for `entity_class`
    """

    def register(schema_class: Type[StaticSchema]) -> Type[StaticSchema]:
        jsonapi_view.JsonApiView.schemas[entity_class] = schema_class
        return schema_class

    return register


def _class_name(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


class SchemaContainer:
    """
    Schemas of the records encoded in one document, keyed by entity class
    """

    def __init__(self, repositories: Iterable[Any], options: PresentationOptions, static_schemas: Optional[dict] = None) -> None:
        """
        :param repositories: repositories (or models/tables) of the records that will be encoded
        :param options: presentation options
        :param static_schemas: {entity class: StaticSchema subclass}, in addition to the registered schemas
        """
        self.options = options
        self.links = LinkBuilder(options)
        self._static_schemas = dict(jsonapi_view.JsonApiView.schemas)
        self._static_schemas.update(static_schemas or {})
        self._schemas: Dict[type, SchemaProvider] = {}
        for repository in repositories:
            self.add(to_repository(repository))

    def add(self, repository: Repository) -> SchemaProvider:
        """
        Create the schema for the records of `repository`
        """
        if repository.is_generic:
            raise SchemaError(
                f'Entity classes must not be the generic "{_class_name(repository.entity_class)}" class for repository "{repository.name}"'
            )
        schema_class = self._static_schemas.get(repository.entity_class, DerivedSchema)
        schema = schema_class(repository, self)
        self._schemas[repository.entity_class] = schema
        return schema

    def get_schema(self, record_or_class: Any) -> SchemaProvider:
        """
        :param record_or_class: record or entity class
        :return: the schema of the record
        """
        cls = record_or_class if isinstance(record_or_class, type) else type(record_or_class)
        schema = self._schemas.get(cls)
        if schema is not None:
            return schema
        if issubclass(cls, GENERIC_RECORD_CLASSES):
            raise SchemaError(f'Unable to resolve the schema of a generic "{_class_name(cls)}" record, pass its repository in "_repositories"')
        # a record reachable through a loaded relationship that isn't part of the contain graph
        jsonapi_view.log.debug(f"Deriving schema for {cls}")
        return self.add(to_repository(cls))

    def get_type(self, record_or_class: Any) -> str:
        return self.get_schema(record_or_class).resource_type
