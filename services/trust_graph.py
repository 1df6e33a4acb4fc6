"""
Trust graph store and trust management.

This module exposes the delegation graph to the recount engine through the
TrustGraph interface: a lookup of a citizen's single trustee plus a snapshot of
every `truster -> trustee` edge. The engine only reads the graph; edges are
written by TrustService on behalf of the citizens managing their delegations.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Mapping, Optional

from db.database import get_session
from db.session_manager import session_scope
from models.citizen import Citizen
from models.trust import TrustEdge
from utils.audit_logger import audit_logger
from utils.error_handling import ResourceNotFoundError

log = logging.getLogger(__name__)


class TrustGraph(ABC):
    """Read-only view of the delegation graph."""

    @abstractmethod
    def trustee_of(self, citizen_id: int) -> Optional[int]:
        """Return the citizen `citizen_id` delegates to, or None."""

    @abstractmethod
    def snapshot(self) -> Dict[int, int]:
        """Return every edge as a `truster -> trustee` mapping."""


class InMemoryTrustGraph(TrustGraph):
    """Trust graph backed by a plain mapping."""

    def __init__(self, edges: Optional[Mapping[int, int]] = None):
        self._edges = dict(edges or {})

    def trustee_of(self, citizen_id: int) -> Optional[int]:
        return self._edges.get(citizen_id)

    def snapshot(self) -> Dict[int, int]:
        return dict(self._edges)


class SqlTrustGraph(TrustGraph):
    """Trust graph read from the `trust_edges` table."""

    def __init__(self, session=None):
        self.session = session or get_session()

    def trustee_of(self, citizen_id: int) -> Optional[int]:
        with session_scope(self.session) as session:
            trustee = session.query(TrustEdge.trustee_id).filter_by(truster_id=citizen_id).scalar()
        return trustee

    def snapshot(self) -> Dict[int, int]:
        with session_scope(self.session) as session:
            rows = session.query(TrustEdge.truster_id, TrustEdge.trustee_id).all()
        log.debug('Loaded %d trust edges', len(rows))
        return {truster: trustee for truster, trustee in rows}


class TrustService:
    """
    Service for managing delegations between citizens.

    Methods:
        trust: Delegate a citizen's vote to a trustee, replacing any previous delegation
        untrust: Remove a citizen's delegation
    """

    def __init__(self, session=None):
        self.session = session or get_session()

    def _require_citizen(self, citizen_id: int) -> Citizen:
        citizen = self.session.get(Citizen, citizen_id)
        if citizen is None:
            raise ResourceNotFoundError(f"Citizen {citizen_id} not found")
        return citizen

    def trust(self, truster_id: int, trustee_id: int) -> TrustEdge:
        """
        Delegate `truster_id`'s vote to `trustee_id`.

        Self-delegation and cycles are accepted; they simply never resolve to a
        caster at recount time.
        """
        self._require_citizen(truster_id)
        self._require_citizen(trustee_id)

        with session_scope(self.session) as session:
            edge = session.query(TrustEdge).filter_by(truster_id=truster_id).first()
            if edge is None:
                edge = TrustEdge(truster_id=truster_id, trustee_id=trustee_id)
                session.add(edge)
            else:
                edge.trustee_id = trustee_id

        log.debug('Citizen %s now trusts %s', truster_id, trustee_id)
        audit_logger.log_trust(truster_id, trustee_id)
        return edge

    def untrust(self, truster_id: int) -> bool:
        """Remove `truster_id`'s delegation. Returns False if there was none."""
        with session_scope(self.session) as session:
            deleted = session.query(TrustEdge).filter_by(truster_id=truster_id).delete()

        if deleted:
            audit_logger.log_trust(truster_id, None)
        return bool(deleted)
