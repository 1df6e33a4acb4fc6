"""
Recount engine.

A recount resolves every pending delegation on a law into proxy votes and
closes voting:

1. take the latch: `open -> recount`, committed before anything else;
2. read the direct votes;
3. snapshot the trust graph and resolve every delegating citizen's chain;
4. assign each resolved citizen a proxy vote copied from its caster,
   never overwriting a direct vote;
5. commit the proxy votes together with `recount -> closed`;
6. return the updated law.

A failure after step 1 leaves the vote set untouched. The engine then tries to
move the law back to `open` so the recount can be retried; if that also
fails the law stays in `recount` until an operator resets it.
"""

import logging
from typing import Optional

from config import Config
from services.delegation import resolve_proxy_votes
from services.law_store import LawStore
from services.trust_graph import TrustGraph
from utils.audit_logger import AuditEventType, audit_logger
from utils.error_handling import AlreadyRecountingError, LiquidLawError, VotingClosedError

log = logging.getLogger(__name__)


class RecountEngine:
    """
    Runs recounts against a LawStore and a TrustGraph.

    Args:
        store: Ledger holding law status and votes
        trust_graph: Delegation graph read at recount time
        compensate_on_failure: Reopen the law when a recount fails after the
            latch. Defaults to Config.RECOUNT_COMPENSATE_ON_FAILURE.
    """

    def __init__(self, store: LawStore, trust_graph: TrustGraph,
                 compensate_on_failure: Optional[bool] = None):
        self.store = store
        self.trust_graph = trust_graph
        if compensate_on_failure is None:
            compensate_on_failure = Config.RECOUNT_COMPENSATE_ON_FAILURE
        self.compensate_on_failure = compensate_on_failure

    def recount(self, law_pk: int):
        log.debug('Proceeding to recount %s', law_pk)

        try:
            self.store.begin_recount(law_pk)
        except (AlreadyRecountingError, VotingClosedError) as e:
            log.debug('Recount of %s refused: %s', law_pk, e.message)
            audit_logger.log_event(
                AuditEventType.RECOUNT_REJECTED,
                status='failure',
                law_id=law_pk,
                message=e.message,
                error_code=e.error_code
            )
            raise

        audit_logger.log_event(AuditEventType.RECOUNT_START, law_id=law_pk,
                               message=f'Recount started for law {law_pk}')

        try:
            direct_votes = self.store.direct_votes(law_pk)
            edges = self.trust_graph.snapshot()
            proxies = resolve_proxy_votes(direct_votes, edges)
            law = self.store.commit_recount(law_pk, proxies.values())
        except Exception as e:
            log.error('Recount of law %s failed: %s', law_pk, e)
            audit_logger.log_recount(law_pk, success=False, reason=str(e))
            if self.compensate_on_failure:
                self._compensate(law_pk)
            raise

        audit_logger.log_recount(
            law_pk,
            success=True,
            direct_votes=len(direct_votes),
            proxy_votes=len(proxies),
            trust_edges=len(edges)
        )
        return law

    def _compensate(self, law_pk: int) -> bool:
        """Move a law stuck in `recount` back to `open`; report whether it worked."""
        try:
            self.store.abort_recount(law_pk)
        except LiquidLawError as e:
            log.error('Law %s left in recount, manual reset required: %s', law_pk, e.message)
            audit_logger.log_event(
                AuditEventType.RECOUNT_COMPENSATE,
                status='failure',
                law_id=law_pk,
                message=f'Could not reopen law {law_pk}: {e.message}'
            )
            return False

        audit_logger.log_event(AuditEventType.RECOUNT_COMPENSATE, law_id=law_pk,
                               message=f'Law {law_pk} reopened after failed recount')
        return True
