# Response class
from flask import Response


class JsonApiResponse(Response):
    """
    Response class, the body is a rendered jsonapi document
    """

    default_mimetype = "application/vnd.api+json"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
