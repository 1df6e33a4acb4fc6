"""
Law model for database operations.

This module defines the Law model, the proposal citizens vote on. A law owns
its votes exclusively and carries the status field the recount latch is built
on: `open` while citizens vote, `recount` while delegations are being
resolved, `closed` once proxy votes have been committed.
"""

import enum
from datetime import datetime, timezone
from typing import Dict

from sqlalchemy import Enum

from db.database import db
from models.vote import VoteValue


def utcnow() -> datetime:
    """Return the current UTC datetime with timezone information."""
    return datetime.now(timezone.utc)


class LawStatus(enum.Enum):
    """Enumeration for law voting status."""
    OPEN = "open"
    RECOUNT = "recount"
    CLOSED = "closed"


class Law(db.Model):
    """
    Law (proposal) model.

    Attributes:
        id (int): Primary key
        law_id (str): Natural key of the law, unique
        title (str): Short title
        summary (str, optional): Longer description
        tag_id (int, optional): Tag the law is filed under
        status (LawStatus): Voting status
        version (int): Bumped by every direct vote so votes and the recount
            latch are serialized on this row
        created_at (datetime): Creation timestamp
        votes (relationship): Direct and proxy votes on this law
    """
    __tablename__ = 'laws'

    id = db.Column(db.Integer, primary_key=True)
    law_id = db.Column(db.String, unique=True, nullable=False)
    title = db.Column(db.String, nullable=False)
    summary = db.Column(db.Text, nullable=True)
    tag_id = db.Column(db.Integer, db.ForeignKey('tags.id'), nullable=True)
    status = db.Column(Enum(LawStatus, name="law_status", native_enum=False),
                       default=LawStatus.OPEN, nullable=False)
    version = db.Column(db.Integer, default=0, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)

    tag = db.relationship('Tag')
    votes = db.relationship('Vote', back_populates='law', cascade='all, delete-orphan',
                            order_by='Vote.author_id')

    def __init__(self, law_id: str, title: str, summary: str = None, tag=None, **kwargs):
        super().__init__(**kwargs)
        self.law_id = law_id
        self.title = title
        self.summary = summary
        self.tag = tag
        self.status = LawStatus.OPEN
        self.version = 0

    def tally(self) -> Dict[str, int]:
        """Count votes per value, direct and proxy alike."""
        counts = {value.value: 0 for value in VoteValue}
        for vote in self.votes:
            counts[vote.value.value] += 1
        return counts

    def __repr__(self) -> str:
        return f"<Law(id={self.id}, law_id='{self.law_id}', status={self.status.value})>"
