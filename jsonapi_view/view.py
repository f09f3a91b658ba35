# view.py: render the view variables as a jsonapi document
#
# Usage in a flask view:
#
#     @app.route("/countries")
#     def countries():
#         query = db.session.query(Country).options(*contain_options(Country, ["currency"]))
#         records, pagination = paginate(query, request.url, request.args.get("page", 1))
#         return make_response({"countries": records, "_contain": ["currency"], "_pagination": pagination})
#
from http import HTTPStatus
from typing import Any, Mapping, Optional
from flask import g, has_app_context
import jsonapi_view
from .config import is_debug
from .encoder import encode_document
from .errors import JsonapiError, errors_document
from .json_encoder import dumps
from .response import JsonApiResponse
from .view_vars import QUERY_LOG_VAR, RenderContext


def render(view_vars: Mapping[str, Any], debug: Optional[bool] = None) -> Optional[str]:
    """
    :param view_vars: view variables, the special variables (starting with "_") configure the rendering
    :param debug: environment mode, pretty printing is only enabled in debug mode
    :return: json text of the jsonapi document, None if there's nothing to render
    """
    context = RenderContext.from_view_vars(view_vars, debug=debug)
    document = encode_document(context)
    if document is None:
        jsonapi_view.log.debug("Nothing to render")
        return None
    return dumps(document, context.options.json_flags)


def _request_query_log() -> Optional[dict]:
    if has_app_context() and isinstance(getattr(g, "jsonapi_query_log", None), list):
        return {"default": list(g.jsonapi_query_log)}
    return None


def make_response(view_vars: Mapping[str, Any], status: int = HTTPStatus.OK.value, debug: Optional[bool] = None) -> JsonApiResponse:
    """
    Render the view variables into a flask response
    In debug mode, the statements logged for the current request are added to the "query" node

    :param view_vars: view variables
    :param status: http status code
    :param debug: environment mode
    :return: JsonApiResponse
    """
    view_vars = dict(view_vars)
    context_debug = debug if debug is not None else view_vars.get("_debug", is_debug())
    if context_debug and QUERY_LOG_VAR not in view_vars:
        query_log = _request_query_log()
        if query_log is not None:
            view_vars[QUERY_LOG_VAR] = query_log

    body = render(view_vars, debug=debug)
    if body is None:
        return JsonApiResponse(status=HTTPStatus.NO_CONTENT.value)
    return JsonApiResponse(body, status=status)


def make_error_response(*errors: JsonapiError) -> JsonApiResponse:
    """
    :param errors: the exceptions raised while rendering
    :return: JsonApiResponse with an "errors" document, the status is the status of the first error
    """
    status = errors[0].status_code if errors else HTTPStatus.INTERNAL_SERVER_ERROR.value
    body = dumps(errors_document(*errors), 0)
    return JsonApiResponse(body, status=status)
