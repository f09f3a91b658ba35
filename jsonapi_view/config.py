# Configuration settings should be set in app.config
# The JsonApiView class variables hold the defaults, environment variables are used as a last resort
import os
import logging
from flask import current_app
import jsonapi_view
from typing import Any


def get_config(option: str) -> Any:
    """Retrieve a configuration parameter from the app
    :param option: configuration parameter
    :return: configuration value
    """
    try:
        result = current_app.config[option]
    except (KeyError, RuntimeError):
        # RuntimeError: working outside of the application context
        result = getattr(jsonapi_view.JsonApiView, option, os.environ.get(option, None))
    return result


def is_debug() -> bool:
    """
    The app is in debug mode when the flask app runs in debug mode
    or when the loglevel is set to debug
    :return: whether the app is in debug mode
    :rtype: Boolean
    """
    try:
        if current_app.debug:
            return True
    except RuntimeError:
        pass
    return jsonapi_view.log.getEffectiveLevel() < logging.INFO
