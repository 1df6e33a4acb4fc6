"""
Law vote ledger.

The ledger holds a law's status and its vote collection. Every status change
is a conditional update (`UPDATE laws SET status = :to WHERE id = :id AND
status = :from`) whose row count tells the caller whether it won, so two
concurrent recounts can never both take the latch. Direct votes go through the
same row: they bump `version` under the condition `status = 'open'`, which
serializes them with the latch.

LawStore is the interface the recount engine depends on; SqlLawStore is the
SQLAlchemy implementation.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, Iterable

from db.database import get_session
from db.session_manager import session_scope
from models.citizen import Citizen
from models.law import Law
from models.vote import Vote, VoteValue
from services import law_state
from services.delegation import ProxyVote
from utils.error_handling import LiquidLawError, ResourceNotFoundError, ValidationError

log = logging.getLogger(__name__)


def parse_vote_value(value) -> VoteValue:
    """Coerce 'positive' / 'negative' / 'neutral' (or a VoteValue) into a VoteValue."""
    if isinstance(value, VoteValue):
        return value
    try:
        return VoteValue(value)
    except ValueError:
        allowed = ', '.join(v.value for v in VoteValue)
        raise ValidationError(f"Invalid vote value {value!r}; expected one of: {allowed}")


class LawStore(ABC):
    """Persistence contract the recount engine and voting rely on."""

    @abstractmethod
    def get_law(self, law_pk: int):
        """Return the law or raise ResourceNotFoundError."""

    @abstractmethod
    def begin_recount(self, law_pk: int) -> None:
        """Atomically move the law from `open` to `recount` and commit."""

    @abstractmethod
    def direct_votes(self, law_pk: int) -> Dict[int, VoteValue]:
        """Return `author -> value` for every direct vote on the law."""

    @abstractmethod
    def commit_recount(self, law_pk: int, proxies: Iterable[ProxyVote]):
        """Write proxy votes and move the law from `recount` to `closed` in one transaction."""

    @abstractmethod
    def abort_recount(self, law_pk: int):
        """Atomically move the law from `recount` back to `open`."""

    @abstractmethod
    def cast_vote(self, law_pk: int, citizen_id: int, value: VoteValue):
        """Record or overwrite a direct vote while the law is `open`."""


class SqlLawStore(LawStore):
    """LawStore backed by the `laws` and `votes` tables."""

    def __init__(self, session=None):
        self.session = session or get_session()

    def get_law(self, law_pk: int) -> Law:
        with session_scope(self.session) as session:
            law = session.get(Law, law_pk)
        if law is None:
            raise ResourceNotFoundError(f"Law {law_pk} not found")
        return law

    def _refuse(self, session, law_pk: int, operation: str):
        """Raise the error explaining why a conditional update on `law_pk` matched no row."""
        status = session.query(Law.status).filter(Law.id == law_pk).scalar()
        if status is None:
            raise ResourceNotFoundError(f"Law {law_pk} not found")
        law_state.next_status(status, operation)
        # The status matches now but did not when the update ran
        raise LiquidLawError(f"Law {law_pk} changed concurrently, retry {operation}", 'CONCURRENT_UPDATE')

    def _transition(self, session, law_pk: int, operation: str) -> None:
        source = law_state.required_status(operation)
        target = law_state.next_status(source, operation)
        updated = (
            session.query(Law)
            .filter(Law.id == law_pk, Law.status == source)
            .update({Law.status: target, Law.version: Law.version + 1}, synchronize_session=False)
        )
        if not updated:
            self._refuse(session, law_pk, operation)
        log.debug('Law %s moved from %s to %s', law_pk, source.value, target.value)

    def begin_recount(self, law_pk: int) -> None:
        with session_scope(self.session) as session:
            self._transition(session, law_pk, law_state.RECOUNT)

    def direct_votes(self, law_pk: int) -> Dict[int, VoteValue]:
        with session_scope(self.session) as session:
            rows = (
                session.query(Vote.author_id, Vote.value)
                .filter(Vote.law_id == law_pk, Vote.is_proxy.is_(False))
                .all()
            )
        return {author: value for author, value in rows}

    def commit_recount(self, law_pk: int, proxies: Iterable[ProxyVote]) -> Law:
        now = datetime.now(timezone.utc)
        applied = 0
        with session_scope(self.session) as session:
            existing = {vote.author_id: vote for vote in session.query(Vote).filter_by(law_id=law_pk)}
            for proxy in proxies:
                vote = existing.get(proxy.author)
                if vote is not None and not vote.is_proxy:
                    # Direct votes always win over delegated ones
                    continue
                if vote is None:
                    vote = Vote(author_id=proxy.author, value=proxy.value, is_proxy=True,
                                caster_id=proxy.caster, law_id=law_pk, cast_at=now)
                    session.add(vote)
                else:
                    vote.value = proxy.value
                    vote.caster_id = proxy.caster
                    vote.cast_at = now
                applied += 1
            session.flush()
            self._transition(session, law_pk, law_state.COMPLETE)

        log.debug('Applied %d proxy votes to law %s', applied, law_pk)
        return self.get_law(law_pk)

    def abort_recount(self, law_pk: int) -> Law:
        # Discard anything a failed recount left pending before reopening
        self.session.rollback()
        with session_scope(self.session) as session:
            self._transition(session, law_pk, law_state.ABORT)
        return self.get_law(law_pk)

    def cast_vote(self, law_pk: int, citizen_id: int, value: VoteValue) -> Law:
        value = parse_vote_value(value)
        with session_scope(self.session) as session:
            if session.get(Citizen, citizen_id) is None:
                raise ResourceNotFoundError(f"Citizen {citizen_id} not found")

            updated = (
                session.query(Law)
                .filter(Law.id == law_pk, Law.status == law_state.required_status(law_state.VOTE))
                .update({Law.version: Law.version + 1}, synchronize_session=False)
            )
            if not updated:
                self._refuse(session, law_pk, law_state.VOTE)

            vote = session.query(Vote).filter_by(law_id=law_pk, author_id=citizen_id).first()
            if vote is None:
                session.add(Vote(author_id=citizen_id, value=value, law_id=law_pk))
            else:
                vote.value = value
                vote.is_proxy = False
                vote.caster_id = None
                vote.cast_at = datetime.now(timezone.utc)

        return self.get_law(law_pk)
