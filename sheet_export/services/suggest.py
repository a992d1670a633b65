from __future__ import annotations

import json
import logging
import re
from typing import Any

from langchain_anthropic import ChatAnthropic
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import HumanMessage
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..models.config_models import DEFAULT_SUGGESTION_MODEL
from ..models.table import Table

"""Column suggestion through a hosted chat model.

Sends the column list and the first rows of a table, asks for the most
useful columns and a one-sentence summary. The result only pre-selects
columns; exports never depend on it.
"""

__all__ = [
    "SUGGESTION_SAMPLE_ROWS",
    "SuggestionError",
    "ColumnSuggestion",
    "build_suggestion_prompt",
    "filter_suggestion",
    "suggest_columns",
]

logger = logging.getLogger(__name__)

SUGGESTION_SAMPLE_ROWS = 5
SUGGESTED_COLUMN_COUNT = 5


class SuggestionError(Exception):
    """Raised when the model call fails or its answer cannot be used."""


class ColumnSuggestion(BaseModel):
    """Model answer: suggested column names and a short dataset summary."""
    model_config = ConfigDict(populate_by_name=True)

    suggested_columns: list[str] = Field(default_factory=list, alias="suggestedColumns")
    summary: str = ""


def _get_model(model_name: str) -> ChatAnthropic:
    return ChatAnthropic(model=model_name)


def build_suggestion_prompt(columns: list[str], sample_rows: list[dict[str, Any]]) -> str:
    preview = json.dumps(sample_rows[:SUGGESTION_SAMPLE_ROWS], ensure_ascii=False, default=str)
    return (
        "You are a data analyst expert.\n"
        f"I have a spreadsheet with the following columns: {', '.join(columns)}.\n"
        f"Here is a sample of the data:\n{preview}\n\n"
        f"Identify the {SUGGESTED_COLUMN_COUNT} most important columns that would be useful "
        "for a summary report or general identification of the records, and give a brief "
        "1-sentence summary of what this dataset appears to contain.\n"
        "Answer with a JSON object only:\n"
        '{"suggestedColumns": ["<exact column name>", ...], "summary": "<one sentence>"}'
    )


def _extract_json_from_text(text: str) -> dict | None:
    """Try to extract a JSON object from model text output."""
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError):
        pass
    match = re.search(r"```(?:json)?\s*(\{.*?\})\s*```", text, re.DOTALL)
    if match:
        try:
            return json.loads(match.group(1))
        except json.JSONDecodeError:
            pass
    match = re.search(r"\{.*\}", text, re.DOTALL)
    if match:
        try:
            return json.loads(match.group(0))
        except json.JSONDecodeError:
            pass
    return None


def _response_text(content: Any) -> str:
    if isinstance(content, str):
        return content.strip()
    if isinstance(content, list):
        for block in content:
            if isinstance(block, dict) and block.get("type") == "text":
                return str(block.get("text", "")).strip()
            if isinstance(block, str) and block.strip():
                return block.strip()
    return ""


def filter_suggestion(suggestion: ColumnSuggestion, columns: list[str]) -> ColumnSuggestion:
    """Keep only suggested columns present in ``columns``, first occurrence wins."""
    known = set(columns)
    kept: list[str] = []
    for col in suggestion.suggested_columns:
        if col in known and col not in kept:
            kept.append(col)
    return ColumnSuggestion(suggested_columns=kept, summary=suggestion.summary)


def suggest_columns(
    table: Table,
    model: BaseChatModel | None = None,
    model_name: str = DEFAULT_SUGGESTION_MODEL,
) -> ColumnSuggestion:
    """Ask the model which columns of ``table`` matter most.

    Raises:
        SuggestionError: model call failed, or no usable JSON in the answer
    """
    prompt = build_suggestion_prompt(table.columns, table.sample(SUGGESTION_SAMPLE_ROWS))
    try:
        chat = model if model is not None else _get_model(model_name)
        response = chat.invoke([HumanMessage(content=prompt)])
    except Exception as e:
        raise SuggestionError(f"suggestion request failed: {e}") from e

    text = _response_text(getattr(response, "content", ""))
    if not text:
        raise SuggestionError("no response from model")
    data = _extract_json_from_text(text)
    if data is None:
        raise SuggestionError("model answer did not contain a JSON object")
    try:
        suggestion = ColumnSuggestion.model_validate(data)
    except ValidationError as e:
        raise SuggestionError(f"unexpected suggestion format: {e}") from e

    filtered = filter_suggestion(suggestion, table.columns)
    dropped = len(suggestion.suggested_columns) - len(filtered.suggested_columns)
    if dropped:
        logger.debug("dropped %d unknown or repeated suggested columns table=%s", dropped, table.name)
    return filtered
