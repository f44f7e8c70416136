# tests/test_domain.py
"""Tests for domain records and their persisted representation"""
import pytest

from app.core.engine.domain import (
    ConversationFlow,
    Entity,
    InboundTurn,
    LocateFacility,
    OutboundMessage,
    QuestionAsked,
    RecognizerResult,
)
from app.core.engine.errors import CollaboratorError, InvalidStateError, ReferenceDataUnavailable
from app.core.engine.serialization import (
    flow_from_dict,
    flow_to_dict,
    locate_from_dict,
    locate_to_dict,
)


class TestConversationFlow:
    def test_defaults(self):
        flow = ConversationFlow()
        assert flow.last_question_asked == QuestionAsked.NONE
        assert flow.in_navigation is False
        assert flow.first_navigation_turn is True
        assert flow.failed_attempts == 0

    def test_reset(self):
        flow = ConversationFlow(
            last_question_asked=QuestionAsked.FROM_LOCATION,
            in_navigation=True,
            first_navigation_turn=False,
            failed_attempts=3,
        )
        flow.reset()
        assert flow == ConversationFlow()

    def test_question_values_match_stored_strings(self):
        assert QuestionAsked.NONE.value == "none"
        assert QuestionAsked.TO_LOCATION.value == "tolocation"
        assert QuestionAsked.FROM_LOCATION.value == "fromlocation"


class TestLocateFacility:
    def test_clear(self):
        locate = LocateFacility(to_location="Lobby", from_location="Gate 1")
        assert not locate.is_empty()
        locate.clear()
        assert locate.is_empty()


class TestMessages:
    def test_inbound_has_text(self):
        assert InboundTurn("c", "u", text="hello").has_text()
        assert not InboundTurn("c", "u", text="   ").has_text()
        assert not InboundTurn("c", "u").has_text()

    def test_outbound_suggestions(self):
        assert not OutboundMessage("hi").has_suggestions()
        assert OutboundMessage("", ["Hi!"]).has_suggestions()

    def test_entity_values_in_order(self):
        rr = RecognizerResult(
            text="from gate 1 to the lobby",
            top_intent="LocateFacility",
            entities=[
                Entity("FromLocation", "gate 1"),
                Entity("ToLocation", "lobby"),
                Entity("ToLocation", "library"),
            ],
        )
        assert rr.entity_values("ToLocation") == ["lobby", "library"]
        assert rr.entity_values("Unknown") == []


class TestErrors:
    def test_collaborator_error_names_collaborator(self):
        err = CollaboratorError("luis", "timeout")
        assert err.collaborator == "luis"
        assert str(err) == "luis: timeout"

    def test_reference_data_unavailable_names_file(self):
        err = ReferenceDataUnavailable("/data/paths.json", "file not found")
        assert err.path == "/data/paths.json"
        assert "/data/paths.json" in str(err)


class TestFlowSerialization:
    def test_round_trip(self):
        flow = ConversationFlow(
            last_question_asked=QuestionAsked.FROM_LOCATION,
            in_navigation=True,
            first_navigation_turn=False,
            failed_attempts=1,
        )
        data = flow_to_dict(flow)
        assert data == {
            "lastQuestionAsked": "fromlocation",
            "inNavigation": True,
            "firstNavigationTurn": False,
            "failedAttempts": 1,
        }
        assert flow_from_dict(data) == flow

    def test_missing_record_gives_fresh_flow(self):
        assert flow_from_dict(None) == ConversationFlow()
        assert flow_from_dict({}) == ConversationFlow()

    def test_legacy_record_with_only_question(self):
        flow = flow_from_dict({"lastQuestionAsked": "tolocation"})
        assert flow.last_question_asked == QuestionAsked.TO_LOCATION
        assert flow.in_navigation is True
        assert flow.first_navigation_turn is False

    def test_unknown_question_raises(self):
        with pytest.raises(InvalidStateError):
            flow_from_dict({"lastQuestionAsked": "destination"})


class TestLocateSerialization:
    def test_unset_slots_are_omitted(self):
        assert locate_to_dict(LocateFacility()) == {}
        assert locate_to_dict(LocateFacility(to_location="Lobby")) == {"tolocation": "Lobby"}

    def test_from_dict(self):
        locate = locate_from_dict({"tolocation": "Lobby", "fromlocation": "Gate 1"})
        assert locate == LocateFacility(to_location="Lobby", from_location="Gate 1")
        assert locate_from_dict(None) == LocateFacility()
