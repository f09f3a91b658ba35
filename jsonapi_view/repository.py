# repository.py: reflection of the SQLAlchemy models (and tables) that records are fetched from
#
# A Repository describes everything we need to know about a record type to serialize it:
# - name: used to derive the jsonapi "type"
# - entity_class: class of the records
# - primary_key: attribute names of the primary key columns, used for the jsonapi "id"
# - fields: the column attribute names
# - associations: the declared relationships
#
# Repositories are built once per model and never modified afterwards, so they can be shared
# between concurrent requests
#
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Optional, Tuple
from sqlalchemy import Table, inspect as sqla_inspect
from sqlalchemy.engine import Row
from sqlalchemy.exc import NoInspectionAvailable
from sqlalchemy.orm.interfaces import MANYTOMANY, MANYTOONE, ONETOMANY
import jsonapi_view
from .errors import SchemaError
from .inflection import same_name

BELONGS_TO = "belongsTo"
HAS_ONE = "hasOne"
HAS_MANY = "hasMany"
BELONGS_TO_MANY = "belongsToMany"

# records of these classes don't carry the information required to derive a schema
GENERIC_RECORD_CLASSES = (Row, dict)

# composite primary key values are joined with this delimiter to create the jsonapi id
PK_DELIMITER = "_"


class Association:
    """
    A relationship declared on a repository
    """

    def __init__(self, relationship) -> None:
        """
        :param relationship: sqlalchemy RelationshipProperty
        """
        self.relationship = relationship
        self.name = relationship.key
        self.direction = relationship.direction
        self.to_many = bool(relationship.uselist)
        self.target = relationship.mapper.class_
        # foreign_keys: attribute names of the owner holding the foreign key (belongsTo)
        # local_keys/remote_keys: owner and target attribute names of the join condition (hasOne/hasMany)
        self.foreign_keys: Tuple[str, ...] = ()
        self.local_keys: Tuple[str, ...] = ()
        self.remote_keys: Tuple[str, ...] = ()
        parent = relationship.parent

        if self.direction == MANYTOONE:
            self.kind = BELONGS_TO
            self.foreign_keys = tuple(parent.get_property_by_column(local).key for local, _ in relationship.local_remote_pairs)
        elif self.direction == ONETOMANY:
            self.kind = HAS_MANY if self.to_many else HAS_ONE
            target_mapper = relationship.mapper
            self.local_keys = tuple(parent.get_property_by_column(local).key for local, _ in relationship.local_remote_pairs)
            self.remote_keys = tuple(target_mapper.get_property_by_column(remote).key for _, remote in relationship.local_remote_pairs)
        elif self.direction == MANYTOMANY:
            self.kind = BELONGS_TO_MANY
        else:  # pragma: no cover
            # should never happen
            raise SchemaError(f"Unknown relationship direction for relationship {self.name}: {self.direction}")

    def __repr__(self) -> str:
        return f"<Association {self.kind} {self.name} -> {self.target.__name__}>"


class Repository:
    """
    Record source: a SQLAlchemy mapped class or a Table (Core queries return generic `Row` records)
    """

    def __init__(self, source: Any, name: Optional[str] = None) -> None:
        """
        :param source: mapped class or sqlalchemy Table
        :param name: repository name, defaults to the table name
        """
        self.source = source
        if isinstance(source, Table):
            self.entity_class = Row
            self.table = source
            self.name = name or source.name
            self.primary_key = tuple(col.key for col in source.primary_key.columns)
            self.fields = tuple(col.key for col in source.columns)
            self.associations = MappingProxyType({})
            self.foreign_keys = frozenset()
            return

        try:
            mapper = sqla_inspect(source)
        except NoInspectionAvailable:
            raise SchemaError(f'Unable to create a repository for "{source}", it is not a mapped class or table')

        exclude_attrs = getattr(source, "exclude_attrs", [])
        exclude_rels = getattr(source, "exclude_rels", [])
        self.entity_class = mapper.class_
        self.table = mapper.local_table
        self.name = name or getattr(source, "__tablename__", None) or getattr(self.table, "name", None) or source.__name__
        self.primary_key = tuple(mapper.get_property_by_column(col).key for col in mapper.primary_key)
        # attributes starting with an underscore are never exposed
        self.fields = tuple(
            prop.key for prop in mapper.column_attrs if not prop.key.startswith("_") and prop.key not in exclude_attrs
        )
        associations = {}
        for relationship in mapper.relationships:
            if relationship.key.startswith("_") or relationship.key in exclude_rels:
                continue
            associations[relationship.key] = Association(relationship)
        self.associations = MappingProxyType(associations)
        self.foreign_keys = frozenset(fk for assoc in associations.values() if assoc.kind == BELONGS_TO for fk in assoc.foreign_keys)
        jsonapi_view.log.debug(f"Created repository {self.name} for {self.entity_class}")

    def __repr__(self) -> str:
        return f"<Repository {self.name}>"

    @property
    def is_generic(self) -> bool:
        """
        :return: whether the records are generic (i.e. not instances of a name-bearing model class)
        """
        return issubclass(self.entity_class, GENERIC_RECORD_CLASSES)

    def get_association(self, name: str) -> Optional[Association]:
        """
        :param name: association name, in any inflection (eg. "national-capital" for "national_capital")
        :return: the association or None
        """
        association = self.associations.get(name)
        if association is not None:
            return association
        for association in self.associations.values():
            if same_name(association.name, name):
                return association
        return None

    def get_id(self, record: Any) -> str:
        """
        :param record: record fetched from this repository
        :return: jsonapi id, composite primary keys are joined with the PK_DELIMITER
        """
        return PK_DELIMITER.join(str(getattr(record, pk)) for pk in self.primary_key)

    @staticmethod
    def is_loaded(record: Any, association_name: str) -> bool:
        """
        Check whether a relationship has been loaded, without triggering a lazy load
        :param record: mapped instance
        :param association_name: relationship name
        """
        try:
            state = sqla_inspect(record)
        except NoInspectionAvailable:
            return False
        return association_name not in state.unloaded


@lru_cache(maxsize=256)
def get_repository(source: Any) -> Repository:
    """
    :param source: mapped class or sqlalchemy Table
    :return: cached Repository
    """
    return Repository(source)


def to_repository(source: Any) -> Repository:
    """
    :param source: Repository, mapped class or sqlalchemy Table
    :return: Repository
    """
    if isinstance(source, Repository):
        return source
    return get_repository(source)
