# encoder.py: jsonapi document encoding
#
# pylint: disable=too-many-instance-attributes
"""
The encoder walks the primary records and the relationships on the include paths:

http://jsonapi.org/format/#fetching-includes

    An endpoint MAY return resources related to the primary data by default.
    An endpoint MAY also support an include request parameter to allow
    the client to customize which related resources should be returned.
    In order to request resources related to other resources,
    a dot-separated path for each relationship name can be specified

    A compound document MUST NOT include more than one resource object
    for each type and id pair.

Included resources are deduplicated by (type, id). A resource that has already been encoded
may still be reached through another include path, in which case the path is followed as well:
the (type, id, path) combinations that have been visited are kept to guarantee termination.
"""
from typing import Any, Dict, List, Mapping, Optional, Tuple
import jsonapi_view
from .associations import get_contained_associations
from .jsonapi_types import JSONAPIData, JSONAPIDocument, JSONAPIResourceIdentifier, JSONAPIResourceObject
from .options import PresentationOptions
from .pagination import get_pagination_links, get_pagination_meta
from .schema import Relationship, SchemaContainer, SchemaProvider
from .view_vars import RenderContext, is_collection


def _graph_to_tree(associations: Mapping[str, dict]) -> Dict[str, dict]:
    """
    :param associations: association graph
    :return: nested dict of association names
    """
    return {name: _graph_to_tree(node["children"]) for name, node in associations.items()}


class Encoder:
    """
    Encode records into the jsonapi "data" and "included" members
    """

    def __init__(self, container: SchemaContainer, associations: Optional[Mapping[str, dict]] = None) -> None:
        """
        :param container: schemas of the records
        :param associations: association graph of the contained relationships, used when no include paths are given
        """
        self.container = container
        self.options = container.options
        self.associations = associations or {}
        self._include_trees: Dict[type, Dict[str, dict]] = {}
        self._resources: Dict[Tuple[str, str], JSONAPIResourceObject] = {}
        self._primary_keys = set()
        self._included: List[JSONAPIResourceObject] = []
        self._visited_paths = set()

    def include_tree(self, schema: SchemaProvider) -> Dict[str, dict]:
        """
        :param schema: schema of a primary record
        :return: the include paths for the primary records of this schema, as a nested dict
        """
        entity_class = schema.repository.entity_class
        if entity_class not in self._include_trees:
            if self.options.include:
                # client supplied paths: invalid relationships are a bad request
                graph = get_contained_associations(schema.repository, self.options.include, status_code=400)
            else:
                graph = self.associations
            self._include_trees[entity_class] = _graph_to_tree(graph)
        return self._include_trees[entity_class]

    def encode_data(self, data: Any) -> Tuple[JSONAPIData, List[JSONAPIResourceObject]]:
        """
        :param data: a record or a collection of records
        :return: primary data, included resources
        """
        records = list(data) if is_collection(data) else [data]
        schemas = [self.container.get_schema(record) for record in records]
        for record, schema in zip(records, schemas):
            self._primary_keys.add((schema.resource_type, schema.get_id(record)))

        primary = [self._encode(record, schema, self.include_tree(schema), "") for record, schema in zip(records, schemas)]
        jsonapi_view.log.debug(f"Encoded {len(primary)} primary and {len(self._included)} included resources")
        if is_collection(data):
            return primary, self._included
        return primary[0], self._included

    def _encode(self, record: Any, schema: SchemaProvider, include_tree: Mapping[str, dict], path: str) -> JSONAPIResourceObject:
        key = (schema.resource_type, schema.get_id(record))
        resource = self._resources.get(key)
        if resource is None:
            resource = self.encode_resource(record, schema)
            self._resources[key] = resource
            if key not in self._primary_keys:
                self._included.append(resource)

        visit_key = key + (path,)
        if not include_tree or visit_key in self._visited_paths:
            return resource
        self._visited_paths.add(visit_key)

        for rel_name, subtree in include_tree.items():
            if rel_name not in schema.relationship_names:
                continue
            association = schema.repository.associations[rel_name]
            if not schema.repository.is_loaded(record, rel_name):
                jsonapi_view.log.debug(f"Relationship {rel_name} of {key} not loaded, nothing to include")
                continue
            related = getattr(record, rel_name)
            related_records = related if association.to_many else [related]
            rel_path = f"{path}.{rel_name}" if path else rel_name
            for related_record in related_records:
                if related_record is None:
                    continue
                related_schema = self.container.get_schema(related_record)
                self._encode(related_record, related_schema, subtree, rel_path)

        return resource

    def allowed_fields(self, schema: SchemaProvider) -> Optional[set]:
        """
        :return: the sparse fieldset of the schema type, None if all fields are allowed
        """
        fields = self.options.field_sets.get(schema.resource_type)
        if fields is None:
            return None
        return set(fields) | {schema.member_name(name) for name in fields}

    def encode_resource(self, record: Any, schema: SchemaProvider) -> JSONAPIResourceObject:
        """
        :return: the resource object for `record`
        """
        allowed = self.allowed_fields(schema)
        resource: JSONAPIResourceObject = {"type": schema.resource_type, "id": schema.get_id(record)}

        attributes = schema.get_attributes(record)
        if allowed is not None:
            attributes = {name: value for name, value in attributes.items() if name in allowed}
        if attributes:
            resource["attributes"] = attributes

        relationships = {}
        for relationship in schema.get_relationships(record):
            if allowed is not None and relationship.name not in allowed:
                continue
            relationships[relationship.name] = self.encode_relationship(relationship)
        if relationships:
            resource["relationships"] = relationships

        resource["links"] = {"self": schema.get_self_link(record)}
        return resource

    def encode_relationship(self, relationship: Relationship) -> dict:
        """
        :return: the relationship object: links and, if available, the resource linkage
        """
        result = {"links": relationship.links}
        if relationship.loaded:
            if relationship.association.to_many:
                result["data"] = [self.identifier(related) for related in relationship.related]
            else:
                result["data"] = self.identifier(relationship.related) if relationship.related is not None else None
        elif relationship.foreign_id is not None and self.options.jsonapi_belongs_to_links:
            result["data"] = {"type": self.container.get_type(relationship.association.target), "id": relationship.foreign_id}
        return result

    def identifier(self, record: Any) -> JSONAPIResourceIdentifier:
        schema = self.container.get_schema(record)
        return {"type": schema.resource_type, "id": schema.get_id(record)}


def get_jsonapi_node(options: PresentationOptions) -> Optional[dict]:
    """
    :return: the top-level "jsonapi" member, None if it's disabled
    """
    if not options.with_jsonapi_version:
        return None
    result = {"version": jsonapi_view.JsonApiView.JSONAPI_VERSION}
    if isinstance(options.with_jsonapi_version, Mapping):
        result["meta"] = dict(options.with_jsonapi_version)
    return result


def get_meta_node(options: PresentationOptions, pagination=None) -> Optional[dict]:
    """
    :return: the top-level "meta" member, None if it's disabled or empty
    """
    if options.meta is False:
        return None
    result = dict(options.meta) if isinstance(options.meta, Mapping) else {}
    if pagination is not None:
        result.update(get_pagination_meta(pagination))
    return result or None


def encode_document(context: RenderContext) -> Optional[JSONAPIDocument]:
    """
    :param context: render context
    :return: jsonapi document, None if there's nothing to render
    """
    options = context.options
    document: JSONAPIDocument = {}

    jsonapi = get_jsonapi_node(options)
    if jsonapi:
        document["jsonapi"] = jsonapi

    if context.data is None:
        # meta-only document (or nothing at all)
        meta = get_meta_node(options)
        if meta:
            document["meta"] = meta
    else:
        container = SchemaContainer(context.repositories.values(), options, context.schemas)
        encoder = Encoder(container, context.associations)
        data, included = encoder.encode_data(context.data)
        meta = get_meta_node(options, context.pagination)
        if meta:
            document["meta"] = meta
        if context.pagination is not None:
            links = get_pagination_links(context.pagination)
            if links:
                document["links"] = links
        document["data"] = data
        if included:
            document["included"] = included

    if not document:
        # no data, meta or jsonapi: a query log is never rendered on its own
        return None
    if context.query_log is not None:
        document["query"] = context.query_log
    return document
