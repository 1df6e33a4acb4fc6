"""
Law service for law-related business logic.

This module provides the LawService class, the entry point the request layer
uses for laws: listing, creation, lookup, direct voting, recount, and the
comments attached to a law. It coordinates the vote ledger, the trust graph
and the recount engine over a single database session.
"""

import logging
from typing import Any, Dict, List, Optional

from db.database import get_session
from db.session_manager import session_scope
from models.comment import Comment
from models.law import Law
from services.comment_service import CommentService
from services.law_store import SqlLawStore
from services.recount_service import RecountEngine
from services.tag_service import resolve_or_create_tag
from services.trust_graph import SqlTrustGraph
from utils.audit_logger import AuditEventType, audit_logger
from utils.error_handling import DuplicateKeyError, ResourceNotFoundError, ValidationError

log = logging.getLogger(__name__)

COMMENT_CONTEXT = 'law'


class LawService:
    """
    Service class for law operations.

    Methods:
        all: List every law
        create: Create a law, resolving its tag; a duplicate law_id returns the existing law
        search_one: Find a law by its natural key
        get: Find a law by primary key
        vote: Cast or overwrite a citizen's direct vote
        recount: Resolve delegations into proxy votes and close voting
        reset_recount: Reopen a law left in `recount` by a failed recount
        tally: Count votes per value
        comment / comments: Attach and list comments on a law
    """

    def __init__(self, session=None, compensate_on_failure: Optional[bool] = None):
        self.session = session or get_session()
        self.store = SqlLawStore(self.session)
        self.engine = RecountEngine(self.store, SqlTrustGraph(self.session),
                                    compensate_on_failure=compensate_on_failure)
        self.comment_service = CommentService(self.session)

    def all(self) -> List[Law]:
        log.debug('Looking for all laws.')
        with session_scope(self.session) as session:
            laws = session.query(Law).order_by(Law.id).all()
        log.debug('Delivering laws %s', [law.id for law in laws])
        return laws

    def create(self, data: Dict[str, Any]) -> Law:
        """
        Create a law from `data` (law_id, title, optional summary and tag).

        When another writer already created a law with the same law_id, the
        existing law is returned instead of failing.
        """
        law_id = data.get('law_id')
        title = data.get('title')
        if not law_id or not title:
            raise ValidationError('law_id and title are required')

        log.debug('Creating new law %s', law_id)
        try:
            with session_scope(self.session) as session:
                tag = resolve_or_create_tag(data['tag'], session) if data.get('tag') else None
                law = Law(law_id=law_id, title=title, summary=data.get('summary'), tag=tag)
                session.add(law)
        except DuplicateKeyError:
            log.debug('Attempt duplication.')
            audit_logger.log_event(AuditEventType.LAW_DUPLICATE, message=f'Law {law_id} already exists')
            return self.search_one(law_id)

        audit_logger.log_event(AuditEventType.LAW_CREATE, law_id=law.id,
                               message=f'Law {law_id} created', law_key=law_id)
        return law

    def search_one(self, law_id: str) -> Law:
        log.debug('Searching for single law matching %s', law_id)
        with session_scope(self.session) as session:
            law = session.query(Law).filter_by(law_id=law_id).first()
        if law is None:
            raise ResourceNotFoundError(f"Law {law_id} not found")
        return law

    def get(self, law_pk: int) -> Law:
        log.debug('Looking for law %s', law_pk)
        return self.store.get_law(law_pk)

    def vote(self, law_pk: int, citizen, value) -> Law:
        """
        Cast `citizen`'s direct vote on a law.

        Args:
            law_pk: Law primary key
            citizen: Citizen id, or any object with an `id`
            value: 'positive', 'negative' or 'neutral'
        """
        citizen_id = getattr(citizen, 'id', citizen)
        log.debug('Proceeding to vote %s at law %s by citizen %s', value, law_pk, citizen_id)
        law = self.store.cast_vote(law_pk, citizen_id, value)
        audit_logger.log_vote(law_pk, citizen_id, getattr(value, 'value', value))
        return law

    def recount(self, law_pk: int) -> Law:
        return self.engine.recount(law_pk)

    def reset_recount(self, law_pk: int) -> Law:
        """Reopen a law stuck in `recount`. Fails unless the law is in `recount`."""
        law = self.store.abort_recount(law_pk)
        audit_logger.log_event(AuditEventType.RECOUNT_RESET, law_id=law_pk,
                               message=f'Law {law_pk} reset to open')
        return law

    def tally(self, law_pk: int) -> Dict[str, int]:
        return self.get(law_pk).tally()

    def comment(self, payload: Dict[str, Any]) -> Comment:
        """Attach a comment to the law referenced by `payload['reference']`."""
        self.get(payload.get('reference'))
        log.debug('Creating comment for law %s', payload.get('reference'))
        return self.comment_service.create_comment(dict(payload, context=COMMENT_CONTEXT))

    def comments(self, law_pk: int) -> List[Comment]:
        log.debug('Get comments for law %s', law_pk)
        return self.comment_service.list_comments(COMMENT_CONTEXT, law_pk)
