# Comment service: comments attach to other entities by (context, reference)

import logging
from typing import Any, Dict, List

from db.database import get_session
from db.session_manager import session_scope
from models.citizen import Citizen
from models.comment import Comment
from utils.error_handling import ResourceNotFoundError, ValidationError

log = logging.getLogger(__name__)


class CommentService:
    """
    Service for creating and listing comments.
    Owns no knowledge of what a reference points to; callers check that.
    """
    REQUIRED_FIELDS = ('context', 'reference', 'author_id', 'text')

    def __init__(self, session=None):
        self.session = session or get_session()

    def create_comment(self, payload: Dict[str, Any]) -> Comment:
        """Create a comment from a payload holding context, reference, author_id and text."""
        missing = [field for field in self.REQUIRED_FIELDS if not payload.get(field)]
        if missing:
            raise ValidationError(f"Missing comment fields: {', '.join(missing)}")

        with session_scope(self.session) as session:
            if session.get(Citizen, payload['author_id']) is None:
                raise ResourceNotFoundError(f"Citizen {payload['author_id']} not found")
            comment = Comment(
                context=payload['context'],
                reference=str(payload['reference']),
                author_id=payload['author_id'],
                text=payload['text'],
            )
            session.add(comment)

        log.debug('Created comment %s on %s %s', comment.id, comment.context, comment.reference)
        return comment

    def list_comments(self, context: str, reference) -> List[Comment]:
        """List comments attached to `reference` within `context`, oldest first."""
        with session_scope(self.session) as session:
            comments = (
                session.query(Comment)
                .filter_by(context=context, reference=str(reference))
                .order_by(Comment.created_at, Comment.id)
                .all()
            )
        return comments
