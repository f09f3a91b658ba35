import logging
import os
import sys
from flask import Flask, g, has_app_context
import flask.app
import jsonapi_view
from .query_log import QueryLogger


class JsonApiView:
    """This class configures a Flask application to render JSON:API documents
    :param app: a Flask application.
    :param db: optional flask_sqlalchemy.SQLAlchemy instance, required for query logging
    :param kwargs: configuration overrides, stored as class variables
    """

    # Configuration settings are stored as class variables
    # they can be overridden in the app.config, cfr. config.get_config()
    URL_PREFIX = None
    WITH_JSONAPI_VERSION = False
    META = {}
    ABSOLUTE_LINKS = False
    JSONAPI_BELONGS_TO_LINKS = False
    INCLUDE = []
    FIELD_SETS = {}
    JSON_OPTIONS = []
    DEBUG_PRETTY_PRINT = True
    INFLECT = "dasherize"
    BASE_URL = None
    # first argument is the url prefix, the others are the resource type, the id and the relationship name
    RESOURCE_URL_FMT = "{}/{}/{}"
    COLLECTION_URL_FMT = "{}/{}"
    RELATIONSHIP_URL_FMT = "{}/{}/{}/relationships/{}"
    DEFAULT_PAGE_LIMIT = 20
    MAX_PAGE_LIMIT = 100000
    QUERY_LOG = False
    JSONAPI_VERSION = "1.1"
    #
    # Statically declared schemas: {entity class: StaticSchema subclass}, see schema.register_schema
    schemas = {}

    def __init__(self, app: flask.app.Flask = None, db=None, **kwargs) -> None:
        """
        Constructor
        """
        self.app = app
        self.db = db
        self.query_logger = None
        if app is not None:
            self.init_app(app, db, **kwargs)

    def init_app(self, app: flask.app.Flask, db=None, **kwargs) -> None:
        """
        Application initialization
        """
        if not isinstance(app, Flask):  # pragma: no cover
            raise TypeError("'app' should be Flask.")

        if db is None:
            db = app.extensions.get("sqlalchemy")
        self.db = db

        if app.config.get("DEBUG", False):
            log.setLevel(logging.DEBUG)

        for conf_name, conf_val in kwargs.items():
            setattr(JsonApiView, conf_name, conf_val)

        app.extensions["jsonapi_view"] = self

        if not app.config.get("QUERY_LOG", JsonApiView.QUERY_LOG):
            return

        if db is None:
            log.warning("QUERY_LOG is enabled but no flask_sqlalchemy instance is available")
            return

        with app.app_context():
            self.query_logger = QueryLogger(db.engine, sink=_request_query_log_sink)
            self.query_logger.attach()

        @app.before_request
        def init_query_log():
            # jsonapi_query_log holds the statements executed while handling this request
            g.jsonapi_query_log = []

    @staticmethod
    def init_logging(loglevel: int = logging.WARNING) -> logging.Logger:
        """
        Specify the log format used in the webserver logs
        The webserver will catch stdout so we redirect eveything to sys.stderr
        """
        log = logging.getLogger(jsonapi_view.__name__)
        if log.level == logging.NOTSET:
            handler = logging.StreamHandler(sys.stderr)
            formatter = logging.Formatter("[%(asctime)s] %(levelname)s: %(message)s")
            handler.setFormatter(formatter)
            log.setLevel(loglevel)
            log.addHandler(handler)
        return log


def _request_query_log_sink(entry: dict) -> None:
    """
    Append a query log entry to the log of the current request (if any)
    """
    if has_app_context() and isinstance(getattr(g, "jsonapi_query_log", None), list):
        g.jsonapi_query_log.append(entry)


#
# logging initialization
#
try:
    DEBUG = os.getenv("DEBUG", logging.WARNING)
    LOGLEVEL = int(DEBUG)
except ValueError:  # pragma: no cover
    print(f'Invalid LogLevel in DEBUG Environment Variable! "{DEBUG}"')
    LOGLEVEL = logging.INFO

log = JsonApiView.init_logging(LOGLEVEL)
