import pytest
from conftest import Country, Culture, Currency
from jsonapi_view import JsonApiView
from jsonapi_view.errors import AssociationResolutionError, SchemaError
from jsonapi_view.options import PresentationOptions
from jsonapi_view.repository import BELONGS_TO, HAS_MANY, get_repository
from jsonapi_view.schema import DerivedSchema, SchemaContainer, StaticSchema, register_schema


def test_repository_reflection(app) -> None:
    repository = get_repository(Country)
    assert repository.name == "countries"
    assert repository.entity_class is Country
    assert repository.primary_key == ("id",)
    assert repository.fields == ("id", "code", "name", "dummy_counter", "currency_id", "national_capital_id")
    assert set(repository.associations) == {"currency", "national_capital", "cultures"}
    assert repository.foreign_keys == {"currency_id", "national_capital_id"}
    assert not repository.is_generic

    currency = repository.associations["currency"]
    assert currency.kind == BELONGS_TO
    assert currency.target is Currency
    assert currency.foreign_keys == ("currency_id",)
    assert not currency.to_many

    cultures = repository.associations["cultures"]
    assert cultures.kind == HAS_MANY
    assert cultures.local_keys == ("id",)
    assert cultures.remote_keys == ("country_id",)

    assert repository.get_association("national-capital") is repository.associations["national_capital"]
    assert repository.get_association("languages") is None
    # the reflection is cached
    assert get_repository(Country) is repository


def test_table_repository_is_generic(app) -> None:
    repository = get_repository(Country.__table__)
    assert repository.name == "countries"
    assert repository.is_generic
    assert repository.primary_key == ("id",)
    assert dict(repository.associations) == {}


def test_derived_schema(session) -> None:
    country = session.get(Country, 1)
    container = SchemaContainer([Country], PresentationOptions())
    schema = container.get_schema(country)
    assert isinstance(schema, DerivedSchema)
    assert schema.resource_type == "countries"
    assert schema.get_id(country) == "1"
    assert schema.get_self_link(country) == "/countries/1"
    assert schema.get_attributes(country) == {"code": "NL", "name": "The Netherlands", "dummy-counter": 11111}

    relationships = {rel.name: rel for rel in schema.get_relationships(country)}
    assert set(relationships) == {"currency", "national-capital", "cultures"}
    assert relationships["currency"].links == {"self": "/currencies/1"}
    assert relationships["currency"].foreign_id == "1"
    assert relationships["currency"].loaded is False
    assert relationships["national-capital"].links == {"self": "/national-capitals/1"}
    assert relationships["cultures"].links == {"self": "/cultures?country_id=1"}
    assert relationships["cultures"].foreign_id is None


def test_relationship_loaded_state(session) -> None:
    country = session.get(Country, 1)
    assert country.currency.code == "EUR"
    container = SchemaContainer([Country], PresentationOptions())
    relationships = {rel.name: rel for rel in container.get_schema(country).get_relationships(country)}
    assert relationships["currency"].loaded
    assert relationships["currency"].related is country.currency
    assert not relationships["cultures"].loaded
    assert relationships["cultures"].related is None


def test_belongs_to_links(session) -> None:
    country = session.get(Country, 1)
    container = SchemaContainer([Country], PresentationOptions(jsonapi_belongs_to_links=True))
    relationships = {rel.name: rel for rel in container.get_schema(country).get_relationships(country)}
    assert relationships["currency"].links == {"self": "/countries/1/relationships/currency"}
    assert relationships["national-capital"].links == {"self": "/countries/1/relationships/national-capital"}


def test_prefixed_and_absolute_links(session) -> None:
    culture = session.get(Culture, 2)
    options = PresentationOptions(url_prefix="/api/", absolute_links=True, base_url="https://example.com/")
    schema = SchemaContainer([Culture], options).get_schema(culture)
    assert schema.get_self_link(culture) == "https://example.com/api/cultures/2"
    relationships = {rel.name: rel for rel in schema.get_relationships(culture)}
    assert relationships["country"].links == {"self": "https://example.com/api/countries/2"}


def test_underscore_inflection(session) -> None:
    country = session.get(Country, 2)
    schema = SchemaContainer([Country], PresentationOptions(inflect="underscore")).get_schema(country)
    assert schema.get_attributes(country) == {"code": "BG", "name": "Bulgaria", "dummy_counter": 22222}
    assert "national_capital" in [rel.name for rel in schema.get_relationships(country)]


def test_generic_entity_class_is_rejected(app) -> None:
    with pytest.raises(SchemaError) as exc_info:
        SchemaContainer([Country.__table__], PresentationOptions())
    assert exc_info.value.message.startswith("Entity classes must not be the generic ")
    assert exc_info.value.message.endswith('Row" class for repository "countries"')


def test_generic_record_has_no_schema(app) -> None:
    container = SchemaContainer([Country], PresentationOptions())
    with pytest.raises(SchemaError):
        container.get_schema({"id": 1, "code": "NL"})


def test_related_schema_is_derived_on_demand(session) -> None:
    currency = session.get(Currency, 1)
    container = SchemaContainer([Country], PresentationOptions())
    assert container.get_type(currency) == "currencies"
    assert container.get_type(Currency) == "currencies"


class NationSchema(StaticSchema):
    resource_type = "nations"
    attribute_names = ("code",)
    relationship_names = ("currency",)


def test_static_schema(session) -> None:
    country = session.get(Country, 1)
    container = SchemaContainer([Country], PresentationOptions(), {Country: NationSchema})
    schema = container.get_schema(country)
    assert isinstance(schema, NationSchema)
    assert schema.get_self_link(country) == "/nations/1"
    assert schema.get_attributes(country) == {"code": "NL"}
    assert [rel.name for rel in schema.get_relationships(country)] == ["currency"]


def test_register_schema(session) -> None:
    register_schema(Country)(NationSchema)
    assert JsonApiView.schemas[Country] is NationSchema
    country = session.get(Country, 1)
    assert SchemaContainer([Country], PresentationOptions()).get_type(country) == "nations"


def test_static_schema_with_unknown_relationship(app) -> None:
    class BrokenSchema(StaticSchema):
        relationship_names = ("languages",)

    with pytest.raises(AssociationResolutionError):
        SchemaContainer([Country], PresentationOptions(), {Country: BrokenSchema})
