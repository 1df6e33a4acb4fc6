"""
Centralized pytest configuration for Liquid Law tests.

This module provides standardized fixtures for all test modules, ensuring
consistent database setup and factories for the citizens, laws and
delegations most tests start from.
"""

import os
import sys

import pytest

# Add project root to Python path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from flask import Flask
from db.database import db
from models.citizen import Citizen
from models.law import Law
from models.trust import TrustEdge


@pytest.fixture(scope="function")
def app():
    """
    Create a Flask app for testing with fresh in-memory database.

    Each test gets a clean database and an active application context; the
    schema is created and dropped around every test function.
    """
    app = Flask(__name__)
    app.config['TESTING'] = True
    app.config['SQLALCHEMY_DATABASE_URI'] = 'sqlite:///:memory:'
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

    with app.app_context():
        db.init_app(app)
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope="function")
def db_session(app):
    """Provide the database session of the test app context."""
    with app.app_context():
        yield db.session


@pytest.fixture
def make_citizens(db_session):
    """
    Factory creating citizens by short name.

    Usage:
        c = make_citizens('c1', 'c2')
        c['c1'].id
    """
    def factory(*names):
        citizens = {name: Citizen(email=f'{name}@example.org', full_name=name.upper()) for name in names}
        db_session.add_all(citizens.values())
        db_session.commit()
        return citizens
    return factory


@pytest.fixture
def make_law(db_session):
    """Factory creating an open law."""
    def factory(law_id='law-1', title='Public transport reform'):
        law = Law(law_id=law_id, title=title)
        db_session.add(law)
        db_session.commit()
        return law
    return factory


@pytest.fixture
def delegate(db_session):
    """Factory writing `truster -> trustee` edges directly."""
    def factory(truster, trustee):
        db_session.add(TrustEdge(truster_id=truster.id, trustee_id=trustee.id))
        db_session.commit()
    return factory
