# Exceptions
#
# None of these errors are caught by the encoder: they abort the rendering of the document
# and should be translated into an error response by the caller, for example:
# {
#     "errors": [
#         {
#             "title": "Schema Error",
#             "detail": "Entity classes must not be the generic ...",
#             "code": "500"
#         }
#     ]
# }
# The application loglevel determines the level of detail shown to the user.
#
from http import HTTPStatus
from sqlalchemy.exc import DontWrapMixin
import jsonapi_view
from .config import is_debug
from .jsonapi_primitives import JsonApiErrorDocument, JsonApiErrorObject

HIDDEN_LOG = "(debug logging disabled)"


class JsonapiError(Exception, DontWrapMixin):
    """
    Base class of the jsonapi_view exceptions
    """

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR.value
    title = "Error"

    def __init__(self, message="", status_code=None):
        """
        :param message: Message to be returned in the (json) body
        :param status_code: HTTP Status code
        """
        Exception.__init__(self, message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        jsonapi_view.log.error("%s: %s", self.title, message)


class ConfigurationError(JsonapiError):
    """
    This exception is raised when the view variables can't be used to render a document,
    eg. an object has been assigned to "_serialize"
    """

    title = "Configuration Error"


class SchemaError(JsonapiError):
    """
    This exception is raised when no schema can be resolved for a record
    """

    title = "Schema Error"


class AssociationResolutionError(JsonapiError):
    """
    This exception is raised when a contained (or included) association does not exist
    """

    title = "Association Resolution Error"


class ValidationError(JsonapiError):
    """
    This exception is raised when invalid input has been detected (client side input)
    Always send back the message to the client in the response
    """

    status_code = HTTPStatus.BAD_REQUEST.value
    title = "Validation Error"

    def __init__(self, message="", status_code=HTTPStatus.BAD_REQUEST.value):
        Exception.__init__(self, message)
        self.message = message
        self.status_code = status_code
        jsonapi_view.log.warning("ValidationError: %s", message)


def errors_document(*errors: JsonapiError) -> dict:
    """
    Create a jsonapi "errors" document for the given exceptions
    :param errors: JsonapiError instances
    :return: jsonapi document dict (mutually exclusive with "data")
    """
    objects = []
    for error in errors:
        detail = error.message
        if not isinstance(error, ValidationError) and not is_debug():
            detail = HIDDEN_LOG
        objects.append(JsonApiErrorObject(title=error.title, detail=detail, code=str(error.status_code)))
    return JsonApiErrorDocument(errors=objects).model_dump(exclude_none=True)
