"""
Comment model for database operations.

Comments are attached to other entities by reference only: a `context` naming
the kind of entity ('law') and the `reference` id within that context.
"""

from datetime import datetime, timezone

from db.database import db


def utcnow() -> datetime:
    """Return the current UTC datetime with timezone information."""
    return datetime.now(timezone.utc)


class Comment(db.Model):
    """Comment model for database operations."""

    __tablename__ = 'comments'
    __table_args__ = (
        db.Index('ix_comments_context_reference', 'context', 'reference'),
    )

    id = db.Column(db.Integer, primary_key=True)
    context = db.Column(db.String, nullable=False)
    reference = db.Column(db.String, nullable=False)
    author_id = db.Column(db.Integer, db.ForeignKey('citizens.id'), nullable=False)
    text = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)

    author = db.relationship('Citizen')

    def __repr__(self) -> str:
        preview = self.text[:20] + "..." if len(self.text) > 20 else self.text
        return f"<Comment(id={self.id}, context='{self.context}', reference='{self.reference}', text='{preview}')>"
