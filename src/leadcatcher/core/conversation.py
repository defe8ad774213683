"""
Conversation Processor: runs one user turn through the completion engine.

A turn is: append the user turn, ask the model, and either record its answer
or service exactly one tool call. Tools that only change session state
(e.g. the locale) get one fresh completion pass afterwards so the reply
reflects the new setting.
"""

import json
from typing import List, Optional

from leadcatcher.llm import CompletionClient, CompletionResult, ToolInvocation
from leadcatcher.logger import get_logger
from leadcatcher.messages import SMS_TEMPLATES, get_message
from leadcatcher.notifications import OperatorNotifier
from leadcatcher.session.history import HistoryLedger
from leadcatcher.session.models import Session, Turn
from leadcatcher.tools.base import ToolOutcome
from leadcatcher.tools.registry import ToolRegistry

logger = get_logger(__name__)

MAX_RESUBMISSIONS = 1


class ConversationProcessor:
    """Encapsulates the completion round trip for a single coalesced turn."""

    def __init__(
        self,
        ledger: HistoryLedger,
        completion: CompletionClient,
        tools: ToolRegistry,
        notifier: Optional[OperatorNotifier] = None,
    ):
        self.ledger = ledger
        self.completion = completion
        self.tools = tools
        self.notifier = notifier

    async def process_message(self, session: Session, user_text: str) -> str:
        """
        Process a coalesced user turn and return the reply text to send.

        Completion failures are not raised; they produce the localized
        general apology and an operator notification.
        """
        user_turn = {"role": "user", "content": user_text}
        self.ledger.append(session, user_turn)

        resubmissions = 0
        while True:
            transcript = self._transcript(session)
            logger.info(f"Sending {len(transcript)} messages to the completion engine for user {session.id}")

            try:
                result = await self.completion.complete(transcript, self.tools.schemas())
            except Exception as e:
                logger.error(f"Error processing message for {session.id}: {e}")
                await self._notify(
                    f"{SMS_TEMPLATES['systemError'].format(errorDetails='Completion engine')}: "
                    f"Error processing message for {session.id} - {e}",
                    session.id,
                )
                return get_message(session.language, "errors", "general")

            if not result.wants_tool:
                content = result.content or ""
                self.ledger.append(session, {"role": "assistant", "content": content})
                return content

            outcome = await self._run_tool_call(session, result)

            if outcome.resubmit:
                if resubmissions < MAX_RESUBMISSIONS:
                    resubmissions += 1
                    self._restore_user_turn(session, user_turn)
                    continue
                logger.warning(f"Tool asked for another completion pass for {session.id}; limit reached")

            reply = result.content or get_message(
                session.language, *(outcome.fallback or ("errors", "general"))
            )
            self.ledger.append(session, {"role": "assistant", "content": reply})
            return reply

    def _transcript(self, session: Session) -> List[Turn]:
        with session.lock:
            return list(session.history)

    def _restore_user_turn(self, session: Session, user_turn: Turn) -> None:
        """Put the turn being answered back if the ledger evicted it."""
        with session.lock:
            present = any(turn is user_turn for turn in session.history)
        if not present:
            logger.info(f"User turn for {session.id} was trimmed; re-adding it before resubmission")
            self.ledger.append(session, user_turn)

    async def _run_tool_call(self, session: Session, result: CompletionResult) -> ToolOutcome:
        """Service the first tool call in ``result`` and record its outcome."""
        call = result.tool_calls[0]
        if len(result.tool_calls) > 1:
            ignored = ", ".join(extra.name for extra in result.tool_calls[1:])
            logger.warning(f"Only one tool call per turn is serviced; ignoring: {ignored}")

        self.ledger.append(
            session,
            {"role": "assistant", "content": result.content, "tool_calls": [call.to_dict()]},
        )

        with session.lock:
            session.tool_calls.begin(call.id)
        try:
            outcome = await self.tools.execute(session, call)
            self.ledger.append(session, self._tool_result_turn(call, outcome))
        finally:
            with session.lock:
                session.tool_calls.complete()

        if outcome.notify_operator:
            name = session.lead_fields.get("name") or "Unknown"
            tool = self.tools.get(call.name)
            heading = tool.failure_alert() if tool else SMS_TEMPLATES["systemError"].format(errorDetails=call.name)
            await self._notify(
                f"{heading}: {call.name} failed for {name} ({session.id}) - "
                f"{outcome.payload.get('error')}",
                session.id,
            )
        return outcome

    @staticmethod
    def _tool_result_turn(call: ToolInvocation, outcome: ToolOutcome) -> Turn:
        return {
            "role": "tool",
            "tool_call_id": call.id,
            "name": call.name,
            "content": json.dumps(outcome.payload, default=str),
        }

    async def _notify(self, message: str, phone: str) -> None:
        if not self.notifier:
            return
        try:
            await self.notifier.notify(message, phone)
        except Exception as e:
            logger.error(f"Failed to send operator notification: {e}")
