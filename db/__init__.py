"""Database package for Liquid Law."""

from db.database import db, init_db, get_session

# Export commonly used functions
__all__ = ['db', 'init_db', 'get_session']
