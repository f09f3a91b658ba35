__version__ = "1.0.0"
__description__ = "jsonapi-view : JSON:API documents for SQLAlchemy records"
