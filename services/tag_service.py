# Tag service for resolving the label a law is filed under

import re

from db.database import get_session
from db.session_manager import get_or_create
from models.tag import Tag
from utils.error_handling import ValidationError


def tag_hash(label: str) -> str:
    """Natural key of a tag: its label lower-cased, non-alphanumerics collapsed to '-'."""
    return re.sub(r'[^a-z0-9]+', '-', label.lower()).strip('-')


def resolve_or_create_tag(label: str, session=None) -> Tag:
    """
    Return the tag for `label`, creating it if needed.

    Two writers racing to create the same tag both end up with the winner's
    row: the loser's uniqueness conflict falls back to a lookup by hash.
    The new tag is flushed, not committed; the caller owns the transaction.
    """
    if not label or not tag_hash(label):
        raise ValidationError(f"Invalid tag label {label!r}")

    session = session or get_session()
    tag, _ = get_or_create(session, Tag, defaults={'name': label.strip()}, hash=tag_hash(label))
    return tag
