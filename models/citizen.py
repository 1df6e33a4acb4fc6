"""
Citizen model for database operations.

A citizen is the identity that votes, delegates, comments and receives
notifications. The law core only ever refers to citizens by id; the email and
full name are what the mailer needs to address them.
"""

from db.database import db


class Citizen(db.Model):
    """Citizen model for database operations."""

    __tablename__ = 'citizens'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String, unique=True, nullable=False)
    full_name = db.Column(db.String, nullable=False)

    def __init__(self, email: str, full_name: str, **kwargs):
        super().__init__(**kwargs)
        self.email = email
        self.full_name = full_name

    def __repr__(self) -> str:
        return f"<Citizen(id={self.id}, email='{self.email}')>"
