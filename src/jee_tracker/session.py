"""Chat session that turns assistant replies into state changes.

One turn: send the user's message, run any tool calls the assistant returned
against the state snapshot taken when the turn began, then perform the
exports those calls requested. Exactly one model message is appended per
turn, including when the assistant fails.
"""
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

from jee_tracker.assistant import AssistantError, ChatMessage
from jee_tracker.executor import ExportKind, execute_tool_calls
from jee_tracker.exporter import export_backup, export_logs_csv
from jee_tracker.models import AppState

logger = logging.getLogger(__name__)

FALLBACK_REPLY = "Connection to Max Core failed. Please verify API Key."
ACTIONS_HEADER = "\n\n**Actions Performed:**\n"


class SessionBusyError(Exception):
    """Raised when a message is submitted while a turn is still running."""


@dataclass
class TurnResult:
    reply: str
    state: AppState
    changed: bool = False
    logs: list[str] = field(default_factory=list)


class FileExporter:
    """Writes requested exports into a directory."""

    def __init__(self, directory: str = "."):
        self.directory = Path(directory)

    def __call__(self, kind: ExportKind, state: AppState) -> Path:
        if kind == ExportKind.LOGS:
            return export_logs_csv(state.logs, self.directory)
        return export_backup(state, self.directory)


class AssistantSession:
    def __init__(self, assistant, exporter: Optional[Callable[[ExportKind, AppState], object]] = None):
        self.assistant = assistant
        self.exporter = exporter
        self.messages: list[ChatMessage] = []
        self.busy = False

    def reset(self) -> None:
        self.messages = []

    def ask(self, text: str, state: AppState) -> TurnResult:
        if not text or not text.strip():
            return TurnResult(reply="", state=state)
        if self.busy:
            raise SessionBusyError("A request is already in progress")

        history = list(self.messages)
        self.messages.append(ChatMessage(role="user", text=text))
        self.busy = True
        result = TurnResult(reply=FALLBACK_REPLY, state=state)
        try:
            try:
                reply = self.assistant.ask(text, history, state)
            except AssistantError as e:
                logger.warning("Assistant turn failed: %s", e)
                return result
            try:
                result = self._apply(reply, state)
            except Exception:
                logger.exception("Failed to apply assistant reply")
                result = TurnResult(reply=FALLBACK_REPLY, state=state)
            return result
        finally:
            self.messages.append(ChatMessage(role="model", text=result.reply))
            self.busy = False

    def _apply(self, reply, state: AppState) -> TurnResult:
        if not reply.tool_calls:
            return TurnResult(reply=reply.text, state=state)
        executed = execute_tool_calls(state, reply.tool_calls)
        reply_text = reply.text
        if executed.logs:
            reply_text += ACTIONS_HEADER + "\n".join(f"• {line}" for line in executed.logs)
        self._run_exports(executed.exports, executed.state)
        return TurnResult(
            reply=reply_text,
            state=executed.state,
            changed=executed.state != state,
            logs=list(executed.logs),
        )

    def _run_exports(self, kinds, state: AppState) -> None:
        if self.exporter is None:
            return
        for kind in kinds:
            try:
                target = self.exporter(kind, state)
                logger.info("Exported %s to %s", kind.value, target)
            except OSError as e:
                logger.error("Export of %s failed: %s", kind.value, e)
