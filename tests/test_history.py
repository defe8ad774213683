"""Tests for the token-budgeted history ledger."""

from leadcatcher.session.history import HistoryLedger
from leadcatcher.session.models import Session

from conftest import count_words

SYSTEM = {"role": "system", "content": "You are a helpful assistant."}  # 5 words


def make_session(*turns):
    return Session(id="u1", history=[dict(SYSTEM), *turns])


class TestTurnCost:
    def test_string_content(self):
        ledger = HistoryLedger(count_words, 100)
        assert ledger.turn_cost({"role": "user", "content": "one two three"}) == 3

    def test_structured_content_counts_only_text_parts(self):
        ledger = HistoryLedger(count_words, 100)
        turn = {
            "role": "user",
            "content": [
                {"type": "text", "text": "look at this"},
                {"type": "image_url", "image_url": {"url": "https://example.com/a.jpg"}},
                {"type": "text", "text": "please"},
            ],
        }
        assert ledger.turn_cost(turn) == 4

    def test_missing_content_costs_nothing(self):
        ledger = HistoryLedger(count_words, 100)
        assert ledger.turn_cost({"role": "assistant", "content": None, "tool_calls": []}) == 0


class TestTrim:
    def test_within_budget_is_untouched(self):
        ledger = HistoryLedger(count_words, 100)
        session = make_session({"role": "user", "content": "hello there"})
        assert ledger.trim(session) == 0
        assert len(session.history) == 2

    def test_oldest_non_system_turns_evicted_first(self):
        ledger = HistoryLedger(count_words, 10)
        session = make_session()

        ledger.append(session, {"role": "user", "content": "one two three"})
        ledger.append(session, {"role": "assistant", "content": "four five six"})

        assert [t["role"] for t in session.history] == ["system", "assistant"]
        assert session.history[1]["content"] == "four five six"
        assert ledger.context_length(session.history) <= 10

    def test_system_turn_is_never_evicted(self):
        ledger = HistoryLedger(count_words, 8)
        session = make_session()

        for n in range(20):
            ledger.append(session, {"role": "user", "content": f"message number {n}"})
            assert session.history[0] == SYSTEM
            assert ledger.context_length(session.history) <= 8

    def test_system_over_budget_leaves_only_system(self):
        ledger = HistoryLedger(count_words, 2)
        session = make_session({"role": "user", "content": "hi"})

        ledger.trim(session)

        assert session.history == [SYSTEM]

    def test_tool_results_evicted_with_their_invocation(self):
        ledger = HistoryLedger(count_words, 11)
        session = make_session(
            {
                "role": "assistant",
                "content": None,
                "tool_calls": [
                    {"id": "call_1", "type": "function", "function": {"name": "setUserLanguage", "arguments": "{}"}}
                ],
            },
            {"role": "tool", "tool_call_id": "call_1", "name": "setUserLanguage", "content": "ok done now"},
            {"role": "user", "content": "one two three four"},
        )

        removed = ledger.trim(session)

        assert removed == 2
        assert [t["role"] for t in session.history] == ["system", "user"]
