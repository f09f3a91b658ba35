from http import HTTPStatus

import pytest
from conftest import Country, NationalCapital, create_app, db, populate
from jsonapi_view import JsonApiView, make_error_response, make_response, render
from jsonapi_view.config import get_config, is_debug
from jsonapi_view.errors import HIDDEN_LOG, SchemaError, ValidationError, errors_document


@pytest.fixture
def query_log_app():
    app = create_app(QUERY_LOG=True)
    with app.app_context():
        db.create_all()
        populate()
    JsonApiView(app, db)

    @app.route("/countries/<int:country_id>")
    def country(country_id):
        return make_response({"country": db.session.get(Country, country_id)}, debug=True)

    @app.route("/nothing")
    def nothing():
        return make_response({"_serialize": False}, debug=False)

    @app.route("/nothing/debug")
    def nothing_debug():
        return make_response({"_serialize": False}, debug=True)

    yield app
    with app.app_context():
        db.drop_all()


def test_extension_configuration(app) -> None:
    extension = JsonApiView(app, URL_PREFIX="/api")
    assert app.extensions["jsonapi_view"] is extension
    assert extension.db is db
    assert JsonApiView.URL_PREFIX == "/api"
    assert get_config("URL_PREFIX") == "/api"
    # app.config takes precedence over the class variables
    app.config["URL_PREFIX"] = "/v2"
    assert get_config("URL_PREFIX") == "/v2"


def test_app_config_is_used_by_render(app, session) -> None:
    app.config["INFLECT"] = "underscore"
    app.config["JSON_OPTIONS"] = [64]
    text = render({"capital": session.get(NationalCapital, 2)}, debug=False)
    assert text.startswith('{"data":{"type":"national_capitals","id":"2"')
    assert '"links":{"self":"/national_capitals/2"}' in text


def test_debug_mode(app) -> None:
    assert not is_debug()
    app.config["DEBUG"] = True
    assert is_debug()


def test_make_response_with_query_log(query_log_app) -> None:
    client = query_log_app.test_client()
    response = client.get("/countries/2")
    assert response.status_code == HTTPStatus.OK
    assert response.mimetype == "application/vnd.api+json"
    document = response.get_json()
    assert document["data"]["attributes"]["code"] == "BG"
    assert list(document) == ["data", "query"]
    assert len(document["query"]["default"]) == 1
    assert "FROM countries" in document["query"]["default"][0]["query"]


def test_make_response_without_content(query_log_app) -> None:
    response = query_log_app.test_client().get("/nothing")
    assert response.status_code == HTTPStatus.NO_CONTENT
    assert response.data == b""


def test_errors_document(app) -> None:
    document = errors_document(ValidationError("Pagination Value Error"), SchemaError("no schema"))
    assert document == {
        "errors": [
            {"title": "Validation Error", "detail": "Pagination Value Error", "code": "400"},
            {"title": "Schema Error", "detail": HIDDEN_LOG, "code": "500"},
        ]
    }
    app.config["DEBUG"] = True
    assert errors_document(SchemaError("no schema"))["errors"][0]["detail"] == "no schema"


def test_make_error_response(app) -> None:
    response = make_error_response(ValidationError("Pagination Value Error"))
    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.mimetype == "application/vnd.api+json"
    assert response.get_json() == {"errors": [{"title": "Validation Error", "detail": "Pagination Value Error", "code": "400"}]}


def test_make_response_without_content_in_debug_mode(query_log_app) -> None:
    # the request query log is not rendered without data
    response = query_log_app.test_client().get("/nothing/debug")
    assert response.status_code == HTTPStatus.NO_CONTENT
    assert response.data == b""
