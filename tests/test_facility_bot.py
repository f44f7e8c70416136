# tests/test_facility_bot.py
"""Tests for the navigation slot-filling state machine"""
import pytest

from app.core.engine.domain import ConversationFlow, LocateFacility, QuestionAsked
from app.core.engine.errors import InvalidStateError, Outcome
from app.core.handlers.facility_bot_handler import FacilityBotHandler

FROM_CHOICES = ["Lobby", "Gate 1", "Gate 2"]


def _texts(replies):
    return [r.text for r in replies]


class TestFacilityBotHandler:
    @pytest.fixture(autouse=True)
    def _handler(self, reference):
        self.handler = FacilityBotHandler(
            reference=reference,
            from_location_choices=FROM_CHOICES,
            max_attempts=0,
        )

    def test_none_asks_for_destination(self):
        flow, locate = ConversationFlow(), LocateFacility()

        replies, flow, locate, outcome = self.handler.advance(flow, locate, "where is the lobby")

        assert _texts(replies) == ["Where are you going?"]
        assert flow.last_question_asked == QuestionAsked.TO_LOCATION
        assert flow.in_navigation is True
        assert flow.first_navigation_turn is False
        assert outcome == Outcome.PROMPTED

    def test_valid_destination_asks_current_location_with_choices(self):
        flow = ConversationFlow(last_question_asked=QuestionAsked.TO_LOCATION, first_navigation_turn=False)
        locate = LocateFacility()

        replies, flow, locate, outcome = self.handler.advance(flow, locate, "Lobby")

        assert _texts(replies) == [
            "I have your destination as Lobby.",
            "From what location are you currently in?",
            "",
        ]
        assert replies[-1].suggested_replies == FROM_CHOICES
        assert locate.to_location == "Lobby"
        assert flow.last_question_asked == QuestionAsked.FROM_LOCATION
        assert outcome == Outcome.PROMPTED

    def test_invalid_destination_stays_in_state(self):
        flow = ConversationFlow(last_question_asked=QuestionAsked.TO_LOCATION, in_navigation=True)
        locate = LocateFacility()

        replies, flow, locate, outcome = self.handler.advance(flow, locate, "Mars")

        assert _texts(replies) == [
            "I'm sorry I can't accept Mars as destination. Please try another location."
        ]
        assert flow.last_question_asked == QuestionAsked.TO_LOCATION
        assert flow.in_navigation is True
        assert flow.failed_attempts == 1
        assert locate.to_location is None
        assert outcome == Outcome.VALIDATION_REJECTED

    def test_valid_current_location_reports_path_and_resets(self):
        flow = ConversationFlow(last_question_asked=QuestionAsked.FROM_LOCATION, in_navigation=True)
        locate = LocateFacility(to_location="Lobby")

        replies, flow, locate, outcome = self.handler.advance(flow, locate, "Gate 1")

        assert _texts(replies) == [
            "I have your destination as Lobby and current location as Gate 1.",
            "Here is the path I found:  Walk straight.",
        ]
        assert outcome == Outcome.PATH_FOUND
        assert flow == ConversationFlow()
        assert locate.is_empty()

    def test_missing_path_escalates_and_resets(self):
        flow = ConversationFlow(last_question_asked=QuestionAsked.FROM_LOCATION, in_navigation=True)
        locate = LocateFacility(to_location="Library")

        replies, flow, locate, outcome = self.handler.advance(flow, locate, "Gate 2")

        assert _texts(replies) == [
            "I have your destination as Library and current location as Gate 2.",
            "I'm sorry I can't find a path that from Gate 2 to Library.",
            "Please kindly inform my creator.",
        ]
        assert outcome == Outcome.PATH_NOT_FOUND
        assert flow.last_question_asked == QuestionAsked.NONE
        assert flow.in_navigation is False
        assert locate.is_empty()

    def test_invalid_current_location_keeps_destination(self):
        flow = ConversationFlow(last_question_asked=QuestionAsked.FROM_LOCATION, in_navigation=True)
        locate = LocateFacility(to_location="Lobby")

        replies, flow, locate, outcome = self.handler.advance(flow, locate, "Library")

        assert _texts(replies) == [
            "I'm sorry I can't accept Library as current location. Please try another location."
        ]
        assert flow.last_question_asked == QuestionAsked.FROM_LOCATION
        assert locate.to_location == "Lobby"
        assert outcome == Outcome.VALIDATION_REJECTED

    def test_prefilled_slots_resolve_in_one_turn(self):
        flow = ConversationFlow(last_question_asked=QuestionAsked.TO_LOCATION)
        locate = LocateFacility(to_location="Lobby", from_location="Gate 1")

        replies, flow, locate, outcome = self.handler.advance(flow, locate, "from gate 1 to the lobby")

        assert _texts(replies) == [
            "I have your destination as Lobby.",
            "I have your destination as Lobby and current location as Gate 1.",
            "Here is the path I found:  Walk straight.",
        ]
        assert outcome == Outcome.PATH_FOUND
        assert flow.in_navigation is False

    def test_prefilled_current_location_used_after_destination(self):
        flow = ConversationFlow(last_question_asked=QuestionAsked.TO_LOCATION, first_navigation_turn=False)
        locate = LocateFacility(from_location="Gate 1")

        replies, flow, locate, outcome = self.handler.advance(flow, locate, "lobby")

        assert _texts(replies)[-1] == "Here is the path I found:  Walk straight."
        assert outcome == Outcome.PATH_FOUND

    def test_accepted_answer_resets_failed_attempts(self):
        flow = ConversationFlow(last_question_asked=QuestionAsked.TO_LOCATION, failed_attempts=2)
        locate = LocateFacility()

        _, flow, _, _ = self.handler.advance(flow, locate, "Registrar")

        assert flow.failed_attempts == 0

    def test_unlimited_attempts_by_default(self):
        flow = ConversationFlow(last_question_asked=QuestionAsked.TO_LOCATION)
        locate = LocateFacility()

        for _ in range(10):
            _, flow, locate, outcome = self.handler.advance(flow, locate, "Mars")

        assert outcome == Outcome.VALIDATION_REJECTED
        assert flow.failed_attempts == 10
        assert flow.in_navigation is True

    def test_unknown_state_raises(self):
        flow = ConversationFlow()
        flow.last_question_asked = "destination"

        with pytest.raises(InvalidStateError):
            self.handler.advance(flow, LocateFacility(), "Lobby")

    def test_current_location_without_destination_asks_destination(self):
        flow = ConversationFlow(
            last_question_asked=QuestionAsked.FROM_LOCATION,
            in_navigation=True,
            first_navigation_turn=False,
            failed_attempts=1,
        )
        locate = LocateFacility()

        replies, flow, locate, outcome = self.handler.advance(flow, locate, "Gate 1")

        assert _texts(replies) == ["Where are you going?"]
        assert flow.last_question_asked == QuestionAsked.TO_LOCATION
        assert flow.in_navigation is True
        assert flow.failed_attempts == 0
        assert locate.is_empty()
        assert outcome == Outcome.PROMPTED

        replies, flow, locate, outcome = self.handler.advance(flow, locate, "Lobby")
        assert locate.to_location == "Lobby"
        assert flow.last_question_asked == QuestionAsked.FROM_LOCATION

        replies, flow, locate, outcome = self.handler.advance(flow, locate, "Gate 1")
        assert _texts(replies)[-1] == "Here is the path I found:  Walk straight."
        assert outcome == Outcome.PATH_FOUND


class TestAttemptCap:
    def test_gives_up_after_max_attempts(self, reference):
        handler = FacilityBotHandler(reference=reference, from_location_choices=FROM_CHOICES, max_attempts=2)
        flow = ConversationFlow(last_question_asked=QuestionAsked.TO_LOCATION, in_navigation=True)
        locate = LocateFacility()

        _, flow, locate, outcome = handler.advance(flow, locate, "Mars")
        assert outcome == Outcome.VALIDATION_REJECTED

        replies, flow, locate, outcome = handler.advance(flow, locate, "Venus")

        assert _texts(replies) == [
            "I'm sorry I can't accept Venus as destination. Please try another location.",
            "I'm sorry, I still couldn't recognize that location. Let's start over another time.",
            "Please kindly inform my creator.",
        ]
        assert outcome == Outcome.ATTEMPTS_EXHAUSTED
        assert flow == ConversationFlow()
        assert locate.is_empty()

    def test_defaults_from_settings(self, monkeypatch):
        from app.config import settings

        monkeypatch.setattr(settings, "navigation_max_attempts", 3)
        monkeypatch.setattr(settings, "from_location_choices", "North Gate, South Gate")

        handler = FacilityBotHandler()

        assert handler._max_attempts == 3
        assert handler._from_choices == ["North Gate", "South Gate"]
