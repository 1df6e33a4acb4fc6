"""Tag model: the label a law is filed under, unique by its slug `hash`."""

from db.database import db


class Tag(db.Model):
    """Tag model for database operations."""

    __tablename__ = 'tags'

    id = db.Column(db.Integer, primary_key=True)
    hash = db.Column(db.String, unique=True, nullable=False)
    name = db.Column(db.String, nullable=False)

    def __repr__(self) -> str:
        return f"<Tag(id={self.id}, hash='{self.hash}')>"
