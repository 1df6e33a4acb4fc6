"""
Tests for the recount engine against the in-memory ledger.

The ledger fake performs status changes as compare-and-set under a lock, so
the concurrency tests here exercise the same latch discipline the SQL store
implements with conditional updates.
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from fakes import InMemoryLawStore, storage_down
from models.law import LawStatus
from models.vote import VoteValue
from services.recount_service import RecountEngine
from services.trust_graph import InMemoryTrustGraph
from utils.error_handling import (
    AlreadyRecountingError,
    PersistenceError,
    ResourceNotFoundError,
    VotingClosedError,
)

LAW = 1


@pytest.fixture
def store():
    store = InMemoryLawStore()
    store.add_law(LAW)
    return store


def engine_for(store, edges=None, compensate=True):
    return RecountEngine(store, InMemoryTrustGraph(edges or {}), compensate_on_failure=compensate)


class TestRecountScenarios:

    def test_transitive_delegation(self, store):
        store.cast_vote(LAW, 1, 'positive')
        law = engine_for(store, {2: 1, 3: 2}).recount(LAW)

        assert law.status is LawStatus.CLOSED
        for citizen in (2, 3):
            assert law.votes[citizen].value is VoteValue.POSITIVE
            assert law.votes[citizen].is_proxy
            assert law.votes[citizen].caster == 1

    def test_cycle_records_no_votes(self, store):
        law = engine_for(store, {4: 5, 5: 4}).recount(LAW)

        assert law.status is LawStatus.CLOSED
        assert 4 not in law.votes
        assert 5 not in law.votes

    def test_direct_vote_takes_precedence(self, store):
        store.cast_vote(LAW, 6, 'negative')
        store.cast_vote(LAW, 7, 'positive')
        law = engine_for(store, {6: 7}).recount(LAW)

        assert law.votes[6].value is VoteValue.NEGATIVE
        assert not law.votes[6].is_proxy

    def test_recount_on_closed_law_is_refused(self, store):
        store.cast_vote(LAW, 1, 'neutral')
        store.laws[LAW].status = LawStatus.CLOSED
        before = dict(store.laws[LAW].votes)

        with pytest.raises(VotingClosedError):
            engine_for(store, {2: 1}).recount(LAW)

        assert store.laws[LAW].votes == before
        assert store.laws[LAW].status is LawStatus.CLOSED

    def test_recount_while_recounting_is_refused(self, store):
        store.laws[LAW].status = LawStatus.RECOUNT
        with pytest.raises(AlreadyRecountingError):
            engine_for(store).recount(LAW)

    def test_recount_runs_only_once(self, store):
        engine = engine_for(store)
        engine.recount(LAW)
        with pytest.raises(VotingClosedError):
            engine.recount(LAW)

    def test_unknown_law(self, store):
        with pytest.raises(ResourceNotFoundError):
            engine_for(store).recount(99)

    def test_direct_votes_are_unchanged(self, store):
        for citizen, value in ((1, 'positive'), (2, 'negative'), (3, 'neutral')):
            store.cast_vote(LAW, citizen, value)
        law = engine_for(store, {1: 2, 2: 3, 4: 1}).recount(LAW)

        assert [(c, law.votes[c].value, law.votes[c].is_proxy) for c in (1, 2, 3)] == [
            (1, VoteValue.POSITIVE, False),
            (2, VoteValue.NEGATIVE, False),
            (3, VoteValue.NEUTRAL, False),
        ]
        assert law.votes[4].value is VoteValue.POSITIVE

    def test_voting_is_refused_after_recount(self, store):
        engine_for(store).recount(LAW)
        with pytest.raises(VotingClosedError):
            store.cast_vote(LAW, 1, 'positive')


class TestRecountConcurrency:

    def test_second_recount_during_first_is_refused(self, store):
        store.cast_vote(LAW, 1, 'positive')
        store.commit_gate = threading.Event()
        engine = engine_for(store, {2: 1})

        with ThreadPoolExecutor(max_workers=1) as pool:
            first = pool.submit(engine.recount, LAW)
            assert store.commit_started.wait(timeout=5)

            with pytest.raises(AlreadyRecountingError):
                engine.recount(LAW)
            with pytest.raises(AlreadyRecountingError):
                store.cast_vote(LAW, 3, 'negative')

            store.commit_gate.set()
            law = first.result(timeout=5)

        assert law.status is LawStatus.CLOSED
        assert law.votes[2].value is VoteValue.POSITIVE
        assert 3 not in law.votes

    def test_exactly_one_concurrent_recount_succeeds(self, store):
        store.cast_vote(LAW, 1, 'positive')
        store.commit_gate = threading.Event()
        engine = engine_for(store, {2: 1})
        start = threading.Barrier(8)

        def attempt():
            start.wait(timeout=5)
            try:
                engine.recount(LAW)
                return 'ok'
            except AlreadyRecountingError:
                return 'refused'

        with ThreadPoolExecutor(max_workers=8) as pool:
            futures = [pool.submit(attempt) for _ in range(8)]
            assert store.commit_started.wait(timeout=5)
            # Hold the winner before its commit until every loser has been refused
            deadline = time.monotonic() + 5
            while sum(f.done() for f in futures) < 7 and time.monotonic() < deadline:
                time.sleep(0.01)
            store.commit_gate.set()
            outcomes = sorted(f.result(timeout=5) for f in futures)

        assert outcomes == ['ok'] + ['refused'] * 7


class TestRecountFailure:

    def test_failure_reopens_law_and_keeps_votes(self, store):
        store.cast_vote(LAW, 1, 'positive')
        store.fail_on_commit = storage_down()

        with pytest.raises(PersistenceError):
            engine_for(store, {2: 1}).recount(LAW)

        law = store.laws[LAW]
        assert law.status is LawStatus.OPEN
        assert set(law.votes) == {1}

    def test_reopened_law_can_be_recounted(self, store):
        store.cast_vote(LAW, 1, 'positive')
        store.fail_on_commit = storage_down()
        engine = engine_for(store, {2: 1})
        with pytest.raises(PersistenceError):
            engine.recount(LAW)

        store.fail_on_commit = None
        law = engine.recount(LAW)
        assert law.status is LawStatus.CLOSED
        assert law.votes[2].value is VoteValue.POSITIVE

    def test_without_compensation_law_stays_in_recount(self, store):
        store.fail_on_commit = storage_down()

        with pytest.raises(PersistenceError):
            engine_for(store, compensate=False).recount(LAW)

        assert store.laws[LAW].status is LawStatus.RECOUNT

    def test_failed_compensation_surfaces_original_error(self, store):
        store.fail_on_commit = storage_down()
        store.fail_on_abort = PersistenceError('connection reset')

        with pytest.raises(PersistenceError) as excinfo:
            engine_for(store).recount(LAW)

        assert 'disk I/O error' in str(excinfo.value)
        assert store.laws[LAW].status is LawStatus.RECOUNT

    def test_trust_graph_errors_propagate(self, store):
        class BrokenGraph(InMemoryTrustGraph):
            def snapshot(self):
                raise PersistenceError('trust store unavailable')

        engine = RecountEngine(store, BrokenGraph(), compensate_on_failure=True)
        with pytest.raises(PersistenceError, match='trust store unavailable'):
            engine.recount(LAW)
        assert store.laws[LAW].status is LawStatus.OPEN
