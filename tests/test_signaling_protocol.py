"""
Tests for the signaling protocol handler.
"""

import pytest

from signaling.protocol import Operation, SignalingHandler, SignalingResult

OFFER = {"type": "offer", "sdp": "v=0\r\n"}
ANSWER = {"type": "answer", "sdp": "v=0\r\n"}


@pytest.fixture
def handler(store):
    return SignalingHandler(store)


class TestOperationParsing:
    def test_wire_values(self):
        assert Operation.parse("get-candidates") is Operation.GET_CANDIDATES
        assert Operation.parse("candidate") is Operation.CANDIDATE

    def test_unknown_value(self):
        assert Operation.parse("close") is None
        assert Operation.parse(None) is None

    def test_publish_flags(self):
        assert Operation.OFFER.is_publish
        assert not Operation.GET_OFFER.is_publish
        assert not Operation.RESET.is_publish


class TestPublishOperations:
    def test_offer_returns_success(self, handler, store):
        result = handler.handle("offer", "camera1", OFFER)

        assert result.status_code == 200
        assert result.body == {"success": True}
        assert store.get_offer("camera1") == OFFER

    def test_answer_returns_success(self, handler, store):
        result = handler.handle("answer", "camera1", ANSWER)

        assert result.body == {"success": True}
        assert store.get_answer("camera1") == ANSWER

    def test_candidate_appends(self, handler):
        handler.handle("candidate", "camera1", {"candidate": "h1"})
        handler.handle("candidate", "camera1", {"candidate": "h2"})

        result = handler.handle("get-candidates", "camera1")
        assert result.body == {"candidates": [{"candidate": "h1"}, {"candidate": "h2"}]}

    def test_missing_payload_rejected(self, handler, store):
        """Publishing without a payload is malformed and mutates nothing."""
        result = handler.handle("offer", "camera1")

        assert result.status_code == 400
        assert "error" in result.body
        assert not store.contains("camera1")


class TestFetchOperations:
    def test_get_offer_round_trip(self, handler):
        handler.handle("offer", "camera1", OFFER)

        result = handler.handle("get-offer", "camera1")

        assert result.ok
        assert result.body == {"offer": OFFER}

    def test_absent_values_are_not_errors(self, handler):
        assert handler.handle("get-offer", "nobody").body == {"offer": None}
        assert handler.handle("get-answer", "nobody").body == {"answer": None}
        assert handler.handle("get-candidates", "nobody").body == {"candidates": []}
        assert handler.handle("get-offer", "nobody").status_code == 200

    def test_fetch_creates_record_lazily(self, handler, store):
        handler.handle("get-offer", "camera1")

        assert store.contains("camera1")

    def test_fetch_does_not_restamp(self, handler, store, clock):
        handler.handle("offer", "camera1", OFFER)
        stamped = clock.now
        clock.advance(30)

        handler.handle("get-offer", "camera1")

        assert store.snapshot("camera1").last_touched == stamped


class TestReset:
    def test_reset_clears_session(self, handler):
        handler.handle("offer", "camera1", OFFER)
        handler.handle("answer", "camera1", ANSWER)
        handler.handle("candidate", "camera1", "h1")

        result = handler.handle("reset", "camera1")

        assert result.body == {"success": True}
        assert handler.handle("get-offer", "camera1").body == {"offer": None}
        assert handler.handle("get-answer", "camera1").body == {"answer": None}
        assert handler.handle("get-candidates", "camera1").body == {"candidates": []}


class TestInvalidOperation:
    def test_unknown_type_is_error(self, handler, store):
        result = handler.handle("close", "camera1", OFFER)

        assert isinstance(result, SignalingResult)
        assert result.status_code == 400
        assert not result.ok
        assert result.body == {"error": "Invalid type"}

    def test_unknown_type_mutates_nothing(self, handler, store):
        handler.handle("bogus", "camera1", OFFER)

        assert not store.contains("camera1")
        assert len(store) == 0

    def test_enum_accepted_directly(self, handler, store):
        handler.handle(Operation.OFFER, "camera1", OFFER)

        assert store.get_offer("camera1") == OFFER
