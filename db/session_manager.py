"""
Session management utilities for database operations.

This module provides context managers and utilities for proper database
session lifecycle management, including automatic commit/rollback and the
translation of SQLAlchemy failures into the application's error taxonomy.
"""

from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from db.database import get_session
from utils.error_handling import DuplicateKeyError, PersistenceError


@contextmanager
def session_scope(session=None):
    """
    Provide a transactional scope around a series of operations.

    This context manager handles:
    - Automatic commit on success
    - Automatic rollback on exceptions
    - Translation of IntegrityError into DuplicateKeyError and of any other
      SQLAlchemyError into PersistenceError

    Usage:
        with session_scope() as session:
            session.add(Citizen(email='ada@example.org', full_name='Ada'))
            # Session is automatically committed here

    Raises:
        DuplicateKeyError, PersistenceError, or the original non-database exception
    """
    if session is None:
        session = get_session()

    try:
        yield session
        session.commit()
    except IntegrityError as e:
        session.rollback()
        raise DuplicateKeyError(f"Duplicate key: {e.orig}") from e
    except SQLAlchemyError as e:
        session.rollback()
        raise PersistenceError(f"Database operation failed: {e}") from e
    except Exception:
        session.rollback()
        raise


def get_or_create(session, model, defaults=None, **kwargs):
    """
    Get an existing instance or create a new one.

    This is a common pattern for "get or create" operations that prevents
    duplicate entries while handling race conditions properly: if another
    writer inserts the same natural key between our lookup and our flush, the
    uniqueness conflict is resolved by looking the winner up.

    Args:
        session: SQLAlchemy session
        model: The model class to query
        defaults: Dictionary of default values for creation
        **kwargs: Keyword arguments to filter by

    Returns:
        Tuple of (instance, created) where created is True if instance was created

    Example:
        tag, created = get_or_create(
            session,
            Tag,
            defaults={'name': 'Transport'},
            hash='transport'
        )
    """
    instance = session.query(model).filter_by(**kwargs).first()

    if instance:
        return instance, False

    params = dict((k, v) for k, v in kwargs.items())
    if defaults:
        params.update(defaults)

    instance = model(**params)

    try:
        session.add(instance)
        session.flush()
        return instance, True
    except IntegrityError:
        # Race condition: another process created it
        session.rollback()
        instance = session.query(model).filter_by(**kwargs).first()
        if instance:
            return instance, False
        raise
