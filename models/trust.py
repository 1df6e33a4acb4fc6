"""
Trust model for database operations.

This module defines the TrustEdge model: a directed delegation from a truster to
a trustee. A citizen delegates to at most one trustee at a time, which the
unique constraint on `truster_id` enforces. Cycles are not rejected here; the
delegation walk tolerates them.
"""

from datetime import datetime, timezone

from db.database import db


def utcnow() -> datetime:
    """Return the current UTC datetime with timezone information."""
    return datetime.now(timezone.utc)


class TrustEdge(db.Model):
    """
    Delegation edge between two citizens.

    Attributes:
        id (int): Primary key, auto-generated unique identifier
        truster_id (int): Citizen who delegates their vote (unique)
        trustee_id (int): Citizen the vote is delegated to
        created_at (datetime): Timestamp when the delegation was set
    """
    __tablename__ = 'trust_edges'

    id = db.Column(db.Integer, primary_key=True)
    truster_id = db.Column(db.Integer, db.ForeignKey('citizens.id'), unique=True, nullable=False)
    trustee_id = db.Column(db.Integer, db.ForeignKey('citizens.id'), nullable=False, index=True)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)

    truster = db.relationship('Citizen', foreign_keys=[truster_id])
    trustee = db.relationship('Citizen', foreign_keys=[trustee_id])

    def __repr__(self) -> str:
        return f"<TrustEdge(truster_id={self.truster_id}, trustee_id={self.trustee_id})>"
