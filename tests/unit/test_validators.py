"""
Validator Unit Tests
Tests for validators/

Tests:
- signal extraction and the stub validator
- credential query params packing
- credential atomic query checks (query hash, GIST root, expiration)
- v3 link id / nullifier checks
- end-to-end submission through the coordinator
"""
import pytest

from core.clock import RealBlockClock
from core.schemas.errors import ProofVerificationException
from core.schemas.requests import ProofRequestInput
from validators import (
    CredentialAtomicQueryV3Validator,
    CredentialAtomicQueryValidator,
    CredentialQueryParams,
    ProofVerifier,
    StateTransitionValidator,
    StubValidator,
    VerifierResult,
)

from fixtures.registry_fixtures import OWNER, make_genesis_identity


QUERY_HASH = 0xABC
USER = 42


def accept_all(inputs, proof):
    return True


def inputs_for(validator_cls, **values):
    """Positional public inputs for a validator's layout (unset signals are 0)."""
    return [values.get(name, 0) for name in validator_cls.signal_layout]


@pytest.fixture
def gist_root(ledger):
    id, genesis = make_genesis_identity()
    ledger.state.transit_state(id, genesis, 0x100, True)
    return ledger.state.get_gist_root()


@pytest.fixture
def v2(ledger, clock):
    return CredentialAtomicQueryValidator(accept_all, state_registry=ledger.state, clock=clock)


@pytest.fixture
def v3(ledger, clock):
    return CredentialAtomicQueryV3Validator(accept_all, state_registry=ledger.state, clock=clock)


def v2_inputs(gist_root, **overrides):
    values = dict(userID=USER, circuitQueryHash=QUERY_HASH, gistRoot=gist_root, timestamp=1_000)
    values.update(overrides)
    return inputs_for(CredentialAtomicQueryValidator, **values)


def v3_inputs(gist_root, **overrides):
    values = dict(userID=USER, circuitQueryHash=QUERY_HASH, gistRoot=gist_root, timestamp=1_000)
    values.update(overrides)
    return inputs_for(CredentialAtomicQueryV3Validator, **values)


def params(**kwargs) -> bytes:
    return CredentialQueryParams(query_hash=QUERY_HASH, **kwargs).pack()


class TestBaseValidators:
    def test_protocol_conformance(self):
        assert isinstance(StubValidator(), ProofVerifier)
        assert isinstance(StateTransitionValidator(accept_all), ProofVerifier)
        assert isinstance(CredentialAtomicQueryV3Validator(accept_all), ProofVerifier)

    def test_stub_signals(self):
        validator = StubValidator(("userID", "linkID"))
        result = validator.verify([1, 2], {"valid": True}, b"")
        assert result.signals == {"userID": 1, "linkID": 2}
        assert result.get("missing", 5) == 5

    def test_stub_rejects(self):
        with pytest.raises(ProofVerificationException, match="Proof is not valid"):
            StubValidator().verify([1], {"valid": "yes"}, b"")

    def test_version_override(self):
        assert StubValidator().version == "stub-v1"
        assert StubValidator(version="custom").version == "custom"
        assert StateTransitionValidator(accept_all).version == "1.0.0"

    def test_verifier_result_defaults(self):
        assert VerifierResult().valid
        assert VerifierResult().get("userID") is None


class TestCredentialQueryParams:
    def test_wire_format_uses_camel_case(self):
        packed = CredentialQueryParams(query_hash=1, group_id=2, nullifier_session_id=3).pack()
        assert b'"queryHash":1' in packed
        assert b'"groupID":2' in packed
        assert b'"nullifierSessionID":3' in packed
        assert CredentialQueryParams.unpack(packed).group_id == 2

    @pytest.mark.parametrize("data", [b"", b"not json", b'{"queryHash": -1}', b'{"other": 1}'])
    def test_invalid_params(self, data):
        with pytest.raises(ProofVerificationException, match="Invalid request params"):
            CredentialQueryParams.unpack(data)


class TestCredentialAtomicQuery:
    def test_valid(self, v2, gist_root):
        result = v2.verify(v2_inputs(gist_root), "proof", params())
        assert result.get("userID") == USER
        assert result.get("circuitQueryHash") == QUERY_HASH
        assert v2.version == "2.0.0"
        assert not v2.binds_sender

    def test_checker_receives_inputs_and_proof(self, ledger, clock, gist_root):
        calls = []

        def checker(inputs, proof):
            calls.append((list(inputs), proof))
            return True

        validator = CredentialAtomicQueryValidator(checker, state_registry=ledger.state, clock=clock)
        inputs = v2_inputs(gist_root)
        validator.verify(inputs, {"pi_a": [1]}, params())
        assert calls == [(inputs, {"pi_a": [1]})]

    def test_checker_rejects(self, ledger, clock, gist_root):
        validator = CredentialAtomicQueryValidator(
            lambda inputs, proof: False, state_registry=ledger.state, clock=clock
        )
        with pytest.raises(ProofVerificationException, match="Proof is not valid"):
            validator.verify(v2_inputs(gist_root), "proof", params())

    def test_query_hash_mismatch(self, v2, gist_root):
        with pytest.raises(ProofVerificationException, match="Query hash does not match the requested one"):
            v2.verify(v2_inputs(gist_root, circuitQueryHash=QUERY_HASH + 1), "proof", params())

    def test_unknown_gist_root(self, v2, gist_root):
        with pytest.raises(ProofVerificationException, match="Gist root state isn't in state contract"):
            v2.verify(v2_inputs(gist_root + 1), "proof", params())

    def test_expired_gist_root(self, v2, ledger, clock, gist_root):
        id, _ = make_genesis_identity()
        clock.advance(seconds=10, blocks=1)
        ledger.state.transit_state(id, 0x100, 0x200, False)
        clock.set(timestamp=1_010 + 3_601)
        now = clock.now().timestamp

        with pytest.raises(ProofVerificationException, match="Gist root is expired"):
            v2.verify(v2_inputs(gist_root, timestamp=now), "proof", params())

        v2.set_gist_root_expiration_timeout(10_000)
        assert v2.verify(v2_inputs(gist_root, timestamp=now), "proof", params()).valid

    def test_current_root_never_expires(self, v2, clock, gist_root):
        clock.set(timestamp=10 ** 6)
        assert v2.verify(v2_inputs(gist_root, timestamp=10 ** 6), "proof", params()).valid

    def test_outdated_proof(self, v2, clock, gist_root):
        clock.set(timestamp=1_000 + 3_601)
        with pytest.raises(ProofVerificationException, match="Generated proof is outdated"):
            v2.verify(v2_inputs(gist_root, timestamp=1_000), "proof", params())

        v2.set_proof_expiration_timeout(4_000)
        assert v2.verify(v2_inputs(gist_root, timestamp=1_000), "proof", params()).valid

    def test_proof_from_the_future(self, v2, gist_root):
        with pytest.raises(ProofVerificationException, match="Generated proof is outdated"):
            v2.verify(v2_inputs(gist_root, timestamp=1_001), "proof", params())

    def test_expiry_checks_leave_block_counter_alone(self):
        clock = RealBlockClock()
        proof_time = clock.now().timestamp
        validator = CredentialAtomicQueryValidator(accept_all, clock=clock)

        for _ in range(3):
            assert validator.verify(v2_inputs(12345, timestamp=proof_time), "proof", params()).valid
        assert clock.peek().block == 1

    def test_without_registry_or_clock(self):
        validator = CredentialAtomicQueryValidator(accept_all)
        result = validator.verify(v2_inputs(12345, timestamp=1), "proof", params())
        assert result.valid

    def test_wrong_input_count(self, v2, gist_root):
        with pytest.raises(ProofVerificationException, match="expects 10 public inputs"):
            v2.verify(v2_inputs(gist_root)[:-1], "proof", params())


class TestCredentialAtomicQueryV3:
    def test_valid(self, v3, gist_root):
        result = v3.verify(v3_inputs(gist_root, linkID=7), "proof", params(group_id=1))
        assert result.get("linkID") == 7
        assert v3.binds_sender
        assert v3.version == "3.0.0-beta.1"

    def test_link_id_required_for_group(self, v3, gist_root):
        with pytest.raises(ProofVerificationException, match="Invalid Link ID pub signal"):
            v3.verify(v3_inputs(gist_root, linkID=0), "proof", params(group_id=1))

    def test_link_id_forbidden_without_group(self, v3, gist_root):
        with pytest.raises(ProofVerificationException, match="Invalid Link ID pub signal"):
            v3.verify(v3_inputs(gist_root, linkID=7), "proof", params())

    def test_nullifier_required_for_session(self, v3, gist_root):
        with pytest.raises(ProofVerificationException, match="Invalid nullify pub signal"):
            v3.verify(v3_inputs(gist_root), "proof", params(nullifier_session_id=5))

        result = v3.verify(v3_inputs(gist_root, nullifier=99), "proof", params(nullifier_session_id=5))
        assert result.get("nullifier") == 99


class TestSubmissionThroughCoordinator:
    def test_v3_linked_submission(self, ledger, clock, v3, gist_root):
        ledger.requests.add_whitelisted_validator("v3", v3, caller=OWNER)
        for request_id in (1, 2):
            ledger.requests.set_request(
                request_id,
                ProofRequestInput(metadata="age check", validator="v3", data=params(group_id=1)),
                caller="verifier-app",
            )

        for request_id in (1, 2):
            status = ledger.coordinator.submit_response(
                request_id, v3_inputs(gist_root, linkID=7), "proof", requester_id=USER
            )
            assert status.validator_version == "3.0.0-beta.1"

        ledger.coordinator.verify_linked_proofs([1, 2], USER)
        assert ledger.coordinator.get_proof_storage_field(USER, 1, "gistRoot") == gist_root
