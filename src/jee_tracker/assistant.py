"""Gemini-backed study assistant that answers with tool calls."""
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Sequence

from google import genai
from google.genai import types

from jee_tracker.executor import ToolCall
from jee_tracker.models import AppState, TestType

logger = logging.getLogger(__name__)

EMPTY_TOOL_REPLY = "Executing command..."
EMPTY_REPLY = "I've processed your request."


def _obj(properties: dict, required: Sequence[str] = ()) -> dict:
    schema = {"type": "OBJECT", "properties": properties}
    if required:
        schema["required"] = list(required)
    return schema


def _s(description: str) -> dict:
    return {"type": "STRING", "description": description}


def _n(description: str) -> dict:
    return {"type": "NUMBER", "description": description}


def _b(description: str) -> dict:
    return {"type": "BOOLEAN", "description": description}


def _score_fields() -> dict:
    fields = {}
    for key, label in (("physics", "Physics"), ("chemistry", "Chemistry"), ("maths", "Mathematics")):
        fields[f"{key}_correct"] = _n(f"Number of correct {label} questions")
        fields[f"{key}_incorrect"] = _n(f"Number of incorrect {label} questions")
        fields[f"{key}_unattempted"] = _n(f"Number of unattempted {label} questions")
    return fields


TOOL_DECLARATIONS = [
    {
        "name": "addChapter",
        "description": "Add a new chapter to the syllabus tracker.",
        "parameters": _obj({
            "name": _s("Name of the chapter"),
            "subject": _s("Subject (Physics, Chemistry, Mathematics)"),
            "unit": _s("Unit or Tag (e.g. Mechanics)"),
            "priority": _s("Priority (A, B, C, D)"),
        }, ["name", "subject"]),
    },
    {
        "name": "updateChapter",
        "description": "Update details of an existing chapter. Use this to change priority, confidence, "
                       "unit/tag or toggle revision checkboxes.",
        "parameters": _obj({
            "chapterName": _s("Name of the chapter to update (fuzzy match)"),
            "unit": _s("New unit/tag for the chapter. Use an empty string to remove it."),
            "priority": _s("New Priority (A, B, C, D)"),
            "confidence": _n("New Confidence level (0-100)"),
            "rev1": _b("Set Revision 1 status"),
            "rev2": _b("Set Revision 2 status"),
            "remarks": _s("Update remarks"),
        }, ["chapterName"]),
    },
    {
        "name": "bulkUpdateChapters",
        "description": "Update multiple chapters at once based on a filter. Use this for requests like "
                       "'remove the X tag from all chapters'.",
        "parameters": _obj({
            "filterUnit": _s("Optional. Filter chapters that currently have this unit/tag name."),
            "updateUnit": _s("The new value for the unit/tag. Use an empty string to remove the tag."),
        }, ["updateUnit"]),
    },
    {
        "name": "updatePYQ",
        "description": "Update PYQ status for a specific year of a chapter.",
        "parameters": _obj({
            "chapterName": _s("Name of the chapter"),
            "year": _n("Year (2021-2025)"),
            "completed": _b("Mark as completed?"),
            "done": _n("Number of questions done"),
        }, ["chapterName", "year"]),
    },
    {
        "name": "addTest",
        "description": "Record a new mock test or exam with detailed scores.",
        "parameters": _obj({
            "name": _s("Name of the test"),
            "date": _s("Date YYYY-MM-DD"),
            "type": _s("Type of test. Options: " + ", ".join(f'"{t.value}"' for t in TestType)),
            "notes": _s("Notes or analysis for the test"),
            **_score_fields(),
        }, ["name", "date"]),
    },
    {
        "name": "addRevisionPlan",
        "description": "Schedule a revision block.",
        "parameters": _obj({
            "chapterName": _s("Chapter name"),
            "startDate": _s("Start date YYYY-MM-DD"),
            "endDate": _s("End date YYYY-MM-DD"),
            "targetQ": _n("Target questions"),
            "notes": _s("Brief notes about this revision plan"),
        }, ["chapterName", "startDate", "endDate"]),
    },
    {
        "name": "logDailyProgress",
        "description": "Log study progress for a specific date.",
        "parameters": _obj({
            "date": _s("Date YYYY-MM-DD"),
            "physicsQ": _n("Physics questions solved"),
            "chemistryQ": _n("Chemistry questions solved"),
            "mathQ": _n("Math questions solved"),
            "studyTime": _n("Study time in minutes"),
            "remarks": _s("Daily remarks"),
        }, ["date"]),
    },
    {
        "name": "deleteItem",
        "description": "Delete a chapter, test, or revision plan.",
        "parameters": _obj({
            "type": _s("Type: 'chapter', 'test', 'revision'"),
            "identifier": _s("Name of chapter/test to delete, or description"),
        }, ["type", "identifier"]),
    },
    {
        "name": "exportData",
        "description": "Export all app data (backup) to a JSON file.",
        "parameters": _obj({}),
    },
    {
        "name": "exportLogs",
        "description": "Export daily study logs to a CSV file.",
        "parameters": _obj({}),
    },
]

PERSONA = """You are 'Max', the ultimate AI protocol for the Maximus JEE app.
You have ABSOLUTE POWER to manage the user's study data.
Priority is ranked A (highest) > B > C > D (lowest)."""

CAPABILITIES = """YOUR CAPABILITIES:
1. Add/Update/Delete Chapters, Tests, Revision Plans.
2. Log daily progress.
3. Update specific PYQ details (checkboxes, counts).
4. Export data (JSON backup) or logs (CSV).
5. Be direct. If the user says "I did 50 physics qs today", use the log tool immediately.
6. If asked to delete, find the closest matching name.
7. For bulk updates like "remove tag X from all chapters", use the bulkUpdateChapters tool."""


class AssistantError(Exception):
    """Raised when the assistant cannot produce a reply."""


@dataclass(frozen=True)
class ChatMessage:
    role: str  # "user" or "model"
    text: str


@dataclass
class AssistantReply:
    text: str
    tool_calls: list[ToolCall] = field(default_factory=list)


def summarize_state(state: AppState, today: Optional[date] = None) -> str:
    chapters = " | ".join(
        f"{c.name} ({c.subject.value}, Prio:{c.priority.value}, Conf:{c.confidence}%)" for c in state.chapters
    )
    tests = ", ".join(f"{t.name} ({t.type.value})" for t in state.tests)
    return (
        "CURRENT STATE:\n"
        f"- Chapters: {chapters}\n"
        f"- Tests: {tests}\n"
        f"- Logs: {len(state.logs)} entries recorded.\n"
        f"- Today: {(today or date.today()).isoformat()}"
    )


def build_prompt(query: str, history: Sequence[ChatMessage], state: AppState, today: Optional[date] = None) -> str:
    transcript = "\n".join(f"{m.role.upper()}: {m.text}" for m in history)
    return (
        f"{PERSONA}\n\n"
        f"{summarize_state(state, today)}\n\n"
        f"{CAPABILITIES}\n\n"
        f"CHAT HISTORY:\n{transcript}\n\n"
        f'USER REQUEST: "{query}"\n\n'
        "Respond with the appropriate tool calls to fulfill the request. "
        "If no tool is needed, provide short, high-yield advice."
    )


def decode_response(response) -> AssistantReply:
    """Turn a ``GenerateContentResponse`` into reply text plus tool calls."""
    calls = [
        ToolCall(name=fc.name or "", args=dict(fc.args or {}))
        for fc in (response.function_calls or [])
    ]
    text = response.text or (EMPTY_TOOL_REPLY if calls else EMPTY_REPLY)
    return AssistantReply(text=text, tool_calls=calls)


class GeminiAssistant:
    """Sends one prompt per turn to Gemini with the tracker's tools attached."""

    def __init__(self, api_key: str, model: str = "gemini-2.5-flash", timeout: float = 60.0):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self._client = None

    @property
    def client(self):
        if self._client is None:
            if not self.api_key:
                raise AssistantError("Gemini API key not configured")
            self._client = genai.Client(
                api_key=self.api_key,
                http_options=types.HttpOptions(timeout=int(self.timeout * 1000)),
            )
        return self._client

    def _config(self) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            tools=[types.Tool(function_declarations=[types.FunctionDeclaration(**d) for d in TOOL_DECLARATIONS])],
        )

    def ask(self, query: str, history: Sequence[ChatMessage], state: AppState) -> AssistantReply:
        prompt = build_prompt(query, history, state)
        try:
            response = self.client.models.generate_content(
                model=self.model, contents=prompt, config=self._config()
            )
        except AssistantError:
            logger.error("Assistant unavailable: no API key")
            raise
        except Exception as e:
            logger.error(f"Gemini-{self.model} error: {str(e)}")
            raise AssistantError(f"Gemini-{self.model} error: {str(e)}") from e
        reply = decode_response(response)
        logger.info(f"Gemini-{self.model} replied with {len(reply.tool_calls)} tool call(s)")
        return reply
