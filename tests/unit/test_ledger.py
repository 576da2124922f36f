"""
Module 09 - Ledger Unit Tests
Tests for orchestrator/ledger.py
"""
import threading

from core.clock import RealBlockClock
from core.config import RuntimeConfig
from core.events import RootUpdated, StateUpdated
from core.schemas.requests import ProofRequestInput
from core.smt import verify_smt_proof
from orchestrator import Ledger, create_ledger, create_test_ledger

from fixtures.registry_fixtures import make_genesis_identity


class TestConstruction:
    def test_components_share_lock_and_events(self):
        ledger = create_test_ledger()
        assert ledger.tree._lock is ledger.lock
        assert ledger.history._lock is ledger.lock
        assert ledger.state._lock is ledger.lock
        assert ledger.requests._lock is ledger.lock
        assert ledger.coordinator._lock is ledger.lock
        assert ledger.state._events is ledger.events
        assert ledger.coordinator._events is ledger.events

    def test_built_from_config(self):
        config = RuntimeConfig.from_dict({
            "tree": {"max_depth": 40},
            "history": {"page_limit": 7},
            "registry": {"owner": "dao", "supported_id_types": ["0x0112"]},
        })
        ledger = Ledger(config)

        assert ledger.tree.max_depth == 40
        assert ledger.history.page_limit == 7
        assert ledger.owner == "dao"
        assert ledger.requests.owner == "dao"
        assert ledger.state.is_id_type_supported("0x0112")

    def test_create_ledger_reads_env(self, monkeypatch):
        monkeypatch.setenv("IDSTATE_SMT_MAX_DEPTH", "24")
        assert create_ledger().tree.max_depth == 24

    def test_ledgers_are_independent(self):
        first = create_test_ledger()
        second = create_test_ledger()
        id, genesis = make_genesis_identity()
        first.state.transit_state(id, genesis, 0x100, True)

        assert first.tree.root != 0
        assert second.tree.root == 0


class TestSummary:
    def test_summary(self, stub_ledger):
        id, genesis = make_genesis_identity()
        stub_ledger.state.transit_state(id, genesis, 0x100, True)
        stub_ledger.requests.set_request(1, ProofRequestInput(validator="stub"), caller="alice")

        summary = stub_ledger.summary()
        assert summary.gist_root == stub_ledger.tree.root
        assert summary.root_history_length == 1
        assert summary.leaf_count == 1
        assert summary.requests_count == 1
        # two whitelistings, one set_request, StateUpdated and RootUpdated
        assert summary.events_count == 5
        assert summary.to_dict()["gist_root"] == str(stub_ledger.tree.root)


class TestConcurrency:
    def test_concurrent_transitions(self):
        ledger = create_test_ledger(64, clock=RealBlockClock())
        identities = [make_genesis_identity(0x1000 + i) for i in range(40)]
        errors = []

        def publish(id, genesis):
            try:
                ledger.state.transit_state(id, genesis, genesis + 1, True)
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=publish, args=identity) for identity in identities]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert ledger.tree.leaf_count == 40
        assert ledger.history.get_history_length() == 40

        entries = ledger.history.get_history(0, 40)
        blocks = [e.created_at_block for e in entries]
        assert blocks == sorted(blocks)
        assert entries[-1].root == ledger.tree.root

        root_events = ledger.events.get_events(RootUpdated)
        assert [e.sequence for e in root_events] == sorted(e.sequence for e in root_events)
        assert [e.block for e in root_events] == blocks
        assert [e.root for e in root_events] == [e.root for e in entries]
        state_events = ledger.events.get_events(StateUpdated)
        assert [e.block_n for e in state_events] == blocks

        for id, genesis in identities:
            proof = ledger.state.get_gist_proof(id)
            assert proof.existence
            assert proof.value == genesis + 1
            assert verify_smt_proof(proof)

    def test_concurrent_submissions(self, stub_ledger):
        stub_ledger.requests.set_request(1, ProofRequestInput(validator="stub"), caller="alice")

        def submit(user):
            stub_ledger.coordinator.submit_response(1, [user], {"valid": True})

        threads = [threading.Thread(target=submit, args=(user,)) for user in range(1, 31)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert all(stub_ledger.coordinator.get_proof_status(user, 1).is_proved for user in range(1, 31))
