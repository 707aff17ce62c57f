"""Tests for intent classification."""

from bqchat.core.exceptions import LLMError
from bqchat.llm.intent import IntentClassifier, parse_intent_reply
from bqchat.llm.prompts import INTENT_SYSTEM

from conftest import FakeLLM


class TestParseIntentReply:
    """Reading the requires_lookup flag."""

    def test_true(self):
        """A true flag parses."""
        assert parse_intent_reply('{"requires_lookup": true}') is True

    def test_false_in_fence(self):
        """A fenced false flag parses."""
        assert parse_intent_reply('```json\n{"requires_lookup": false}\n```') is False

    def test_non_boolean_flag(self):
        """String flags are not trusted."""
        assert parse_intent_reply('{"requires_lookup": "yes"}') is None

    def test_not_json(self):
        """Prose replies are undecided."""
        assert parse_intent_reply("Sim, precisa consultar.") is None


class TestIntentClassifier:
    """Strategy ordering and the fail-open default."""

    def test_greeting_needs_no_lookup(self):
        """The model's false decision is returned."""
        llm = FakeLLM(['{"requires_lookup": false}'])
        assert IntentClassifier(llm).requires_lookup("Olá!") is False
        call = llm.calls[0]
        assert call["system_instruction"] == INTENT_SYSTEM
        assert call["response_mime_type"] == "application/json"
        assert "Olá!" in call["prompt"]

    def test_data_question_needs_lookup(self):
        """The model's true decision is returned."""
        llm = FakeLLM(['{"requires_lookup": true}'])
        assert IntentClassifier(llm).requires_lookup("Quantos professores?") is True

    def test_llm_failure_assumes_lookup(self):
        """A failing model call defaults to a lookup."""
        llm = FakeLLM([LLMError("down")])
        assert IntentClassifier(llm).requires_lookup("Olá!") is True

    def test_unparseable_reply_assumes_lookup(self):
        """An unparseable reply defaults to a lookup."""
        llm = FakeLLM(["talvez"])
        assert IntentClassifier(llm).requires_lookup("Olá!") is True

    def test_first_deciding_strategy_wins(self):
        """Strategies are tried in order until one decides."""
        seen = []

        def undecided(question):
            seen.append("undecided")
            return None

        def broken(question):
            seen.append("broken")
            raise RuntimeError("boom")

        def says_no(question):
            seen.append("says_no")
            return False

        def never(question):
            seen.append("never")
            return True

        classifier = IntentClassifier(FakeLLM(), strategies=[undecided, broken, says_no, never])
        assert classifier.requires_lookup("Obrigado!") is False
        assert seen == ["undecided", "broken", "says_no"]
