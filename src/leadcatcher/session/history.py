"""
Token-budgeted conversation history.

Turns are OpenAI-style message dicts. When the summed token cost exceeds the
budget, turns are evicted oldest first; system turns are never evicted.
"""

from typing import Iterable

from leadcatcher.core.tokenizer import TokenCounter
from leadcatcher.logger import get_logger

from .models import Session, Turn

logger = get_logger(__name__)


class HistoryLedger:
    """Appends turns to a session's history and keeps it within budget."""

    def __init__(self, count_tokens: TokenCounter, max_tokens: int):
        self.count_tokens = count_tokens
        self.max_tokens = max_tokens

    def turn_cost(self, turn: Turn) -> int:
        """
        Token cost of a single turn.

        Plain string content is counted in full. For a list of content parts
        only text parts count; media parts contribute nothing.
        """
        content = turn.get("content")
        if isinstance(content, str):
            return self.count_tokens(content)
        if isinstance(content, list):
            return sum(
                self.count_tokens(part.get("text", ""))
                for part in content
                if isinstance(part, dict) and part.get("type") == "text"
            )
        return 0

    def context_length(self, turns: Iterable[Turn]) -> int:
        return sum(self.turn_cost(turn) for turn in turns)

    def append(self, session: Session, turn: Turn) -> None:
        with session.lock:
            session.history.append(turn)
            self.trim(session)

    def trim(self, session: Session) -> int:
        """Evict oldest non-system turns until within budget. Returns count removed."""
        with session.lock:
            history = session.history
            total = self.context_length(history)
            if total <= self.max_tokens:
                return 0

            logger.info(f"Trimming session for {session.id}, current tokens: {total}")

            removed = 0
            i = 0
            while total > self.max_tokens and i < len(history):
                turn = history[i]
                if turn.get("role") == "system":
                    i += 1
                    continue

                evicted = [history.pop(i)]
                # Tool results go with the invocation that produced them.
                if turn.get("role") == "assistant" and turn.get("tool_calls"):
                    call_ids = {call.get("id") for call in turn["tool_calls"]}
                    while (
                        i < len(history)
                        and history[i].get("role") == "tool"
                        and history[i].get("tool_call_id") in call_ids
                    ):
                        evicted.append(history.pop(i))

                total -= self.context_length(evicted)
                removed += len(evicted)
                logger.debug(f"Removed {len(evicted)} turn(s), new token count: {total}")

            return removed
