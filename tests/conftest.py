import pytest
from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from jsonapi_view import JsonApiView, log

db = SQLAlchemy()


class Currency(db.Model):
    __tablename__ = "currencies"
    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(3))
    name = db.Column(db.String(50))
    countries = db.relationship("Country", back_populates="currency")


class NationalCapital(db.Model):
    __tablename__ = "national_capitals"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(50))
    description = db.Column(db.String(250))
    countries = db.relationship("Country", back_populates="national_capital")


class Country(db.Model):
    __tablename__ = "countries"
    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(2))
    name = db.Column(db.String(50))
    dummy_counter = db.Column(db.Integer, default=0)
    currency_id = db.Column(db.Integer, db.ForeignKey("currencies.id"))
    national_capital_id = db.Column(db.Integer, db.ForeignKey("national_capitals.id"))
    currency = db.relationship("Currency", back_populates="countries")
    national_capital = db.relationship("NationalCapital", back_populates="countries")
    cultures = db.relationship("Culture", back_populates="country")


class Culture(db.Model):
    __tablename__ = "cultures"
    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(5))
    name = db.Column(db.String(50))
    country_id = db.Column(db.Integer, db.ForeignKey("countries.id"))
    country = db.relationship("Country", back_populates="cultures")


def create_app(**config):
    app = Flask(__name__)
    app.config.update(SQLALCHEMY_DATABASE_URI="sqlite://", TESTING=True, DEBUG=False)
    app.config.update(config)
    db.init_app(app)
    return app


def populate():
    eur = Currency(id=1, code="EUR", name="Euro")
    bgn = Currency(id=2, code="BGN", name="Bulgarian lev")
    amsterdam = NationalCapital(id=1, name="Amsterdam", description="Dutch capital")
    sofia = NationalCapital(id=2, name="Sofia", description="Bulgarian capital")
    netherlands = Country(id=1, code="NL", name="The Netherlands", dummy_counter=11111, currency=eur, national_capital=amsterdam)
    bulgaria = Country(id=2, code="BG", name="Bulgaria", dummy_counter=22222, currency=bgn, national_capital=sofia)
    belgium = Country(id=3, code="BE", name="Belgium", dummy_counter=33333, currency=eur)
    cultures = [
        Culture(id=1, code="nl-NL", name="Dutch", country=netherlands),
        Culture(id=2, code="bg-BG", name="Bulgarian", country=bulgaria),
        Culture(id=3, code="fy-NL", name="Frisian", country=netherlands),
    ]
    db.session.add_all([eur, bgn, amsterdam, sofia, netherlands, bulgaria, belgium] + cultures)
    db.session.commit()
    # start the tests without any loaded relationships
    db.session.expunge_all()


@pytest.fixture
def app():
    app = create_app()
    with app.app_context():
        db.create_all()
        populate()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def session(app):
    return db.session


@pytest.fixture(autouse=True)
def _restore_config():
    """
    JsonApiView.init_app() stores the configuration overrides as class variables
    and sets the loglevel of debug apps
    """
    loglevel = log.level
    saved = {name: value for name, value in vars(JsonApiView).items() if name.isupper()}
    schemas = dict(JsonApiView.schemas)
    yield
    for name, value in saved.items():
        setattr(JsonApiView, name, value)
    JsonApiView.schemas = schemas
    log.setLevel(loglevel)
