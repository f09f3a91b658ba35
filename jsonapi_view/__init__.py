# flake8: noqa: F401
#
# view_init has to be imported first: the other modules log through jsonapi_view.log
#
from .view_init import JsonApiView, log
from .errors import JsonapiError, ConfigurationError, SchemaError, AssociationResolutionError, ValidationError, errors_document
from .options import JsonOption, PresentationOptions
from .repository import Repository, get_repository
from .schema import StaticSchema, DerivedSchema, SchemaContainer, register_schema
from .associations import get_contained_associations, get_repository_list, get_include_paths, contain_options
from .pagination import get_pagination_links, get_pagination_meta, paginate
from .query_log import QueryLogger
from .encoder import Encoder, encode_document
from .json_encoder import dumps
from .view import render, make_response, make_error_response
from .response import JsonApiResponse
from .__about__ import __version__, __description__

__all__ = (
    "__version__",
    "__description__",
    #
    "JsonApiView",
    "render",
    "make_response",
    "make_error_response",
    "JsonApiResponse",
    # schemas:
    "Repository",
    "get_repository",
    "StaticSchema",
    "DerivedSchema",
    "SchemaContainer",
    "register_schema",
    # associations:
    "get_contained_associations",
    "get_repository_list",
    "get_include_paths",
    "contain_options",
    # encoding:
    "Encoder",
    "encode_document",
    "dumps",
    "JsonOption",
    "PresentationOptions",
    # pagination & query log:
    "get_pagination_links",
    "get_pagination_meta",
    "paginate",
    "QueryLogger",
    # Errors:
    "JsonapiError",
    "ConfigurationError",
    "SchemaError",
    "AssociationResolutionError",
    "ValidationError",
    "errors_document",
)
