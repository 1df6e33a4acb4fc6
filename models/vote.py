"""
Vote model for database operations.

A vote is either direct (cast by its author) or a proxy vote assigned at
recount, whose value is copied from the caster at the end of the author's
delegation chain. Each citizen holds at most one vote per law.
"""

import enum
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Enum

from db.database import db


def utcnow() -> datetime:
    """Return the current UTC datetime with timezone information."""
    return datetime.now(timezone.utc)


class VoteValue(enum.Enum):
    """Enumeration for vote values."""
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class Vote(db.Model):
    """
    Vote of one citizen on one law.

    Attributes:
        id (int): Primary key
        law_id (int): Law the vote belongs to
        author_id (int): Citizen the vote counts for
        value (VoteValue): positive, negative or neutral
        cast_at (datetime): When the vote was cast or assigned
        is_proxy (bool): True when assigned by delegation at recount
        caster_id (int, optional): For proxy votes, the citizen whose vote was inherited
    """
    __tablename__ = 'votes'
    __table_args__ = (
        db.UniqueConstraint('law_id', 'author_id', name='uq_vote_law_author'),
    )

    id = db.Column(db.Integer, primary_key=True)
    law_id = db.Column(db.Integer, db.ForeignKey('laws.id'), nullable=False, index=True)
    author_id = db.Column(db.Integer, db.ForeignKey('citizens.id'), nullable=False)
    value = db.Column(Enum(VoteValue, name="vote_value", native_enum=False), nullable=False)
    cast_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
    is_proxy = db.Column(db.Boolean, default=False, nullable=False)
    caster_id = db.Column(db.Integer, db.ForeignKey('citizens.id'), nullable=True)

    law = db.relationship('Law', back_populates='votes')

    def __init__(self, author_id: int, value: VoteValue, is_proxy: bool = False,
                 caster_id: Optional[int] = None, **kwargs):
        super().__init__(**kwargs)
        self.author_id = author_id
        self.value = value
        self.is_proxy = is_proxy
        self.caster_id = caster_id

    def __repr__(self) -> str:
        kind = f"proxy of {self.caster_id}" if self.is_proxy else "direct"
        return f"<Vote(law_id={self.law_id}, author_id={self.author_id}, value={self.value.value}, {kind})>"
