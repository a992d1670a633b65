from __future__ import annotations

from unittest.mock import Mock, patch

import pytest
from langchain_core.messages import AIMessage, HumanMessage

from sheet_export.models.table import Table
from sheet_export.services.suggest import (
    ColumnSuggestion,
    SuggestionError,
    build_suggestion_prompt,
    filter_suggestion,
    suggest_columns,
)


def _model(content) -> Mock:
    model = Mock()
    model.invoke.return_value = AIMessage(content=content)
    return model


def test_prompt_lists_columns_and_sample(plain_table: Table):
    prompt = build_suggestion_prompt(plain_table.columns, plain_table.rows)

    assert "Name, Order Date, Amount, Notes" in prompt
    assert '"Alice"' in prompt
    assert "suggestedColumns" in prompt


def test_prompt_sample_is_limited():
    rows = [{"A": f"v{i}"} for i in range(10)]
    prompt = build_suggestion_prompt(["A"], rows)

    assert "v4" in prompt
    assert "v5" not in prompt


def test_suggest_columns_parses_plain_json(plain_table: Table):
    model = _model('{"suggestedColumns": ["Name", "Amount"], "summary": "Customer orders."}')

    suggestion = suggest_columns(plain_table, model=model)

    assert suggestion.suggested_columns == ["Name", "Amount"]
    assert suggestion.summary == "Customer orders."
    (messages,), _ = model.invoke.call_args
    assert isinstance(messages[0], HumanMessage)


def test_suggest_columns_parses_fenced_json(plain_table: Table):
    text = 'Here you go:\n```json\n{"suggestedColumns": ["Notes"], "summary": "s"}\n```'
    assert suggest_columns(plain_table, model=_model(text)).suggested_columns == ["Notes"]


def test_suggest_columns_reads_content_blocks(plain_table: Table):
    blocks = [{"type": "text", "text": '{"suggestedColumns": ["Name"], "summary": ""}'}]
    assert suggest_columns(plain_table, model=_model(blocks)).suggested_columns == ["Name"]


def test_unknown_and_repeated_columns_are_dropped(plain_table: Table):
    model = _model('{"suggestedColumns": ["Name", "Customer", "Name", "Amount"], "summary": "x"}')
    assert suggest_columns(plain_table, model=model).suggested_columns == ["Name", "Amount"]


def test_model_failure_raises_suggestion_error(plain_table: Table):
    model = Mock()
    model.invoke.side_effect = RuntimeError("network down")

    with pytest.raises(SuggestionError, match="network down"):
        suggest_columns(plain_table, model=model)


@pytest.mark.parametrize("content", ["", "no json here", '{"suggestedColumns": "Name"}'])
def test_unusable_answers_raise(plain_table: Table, content: str):
    with pytest.raises(SuggestionError):
        suggest_columns(plain_table, model=_model(content))


def test_default_model_built_from_name(plain_table: Table):
    model = _model('{"suggestedColumns": [], "summary": ""}')
    with patch("sheet_export.services.suggest._get_model", return_value=model) as get_model:
        suggest_columns(plain_table, model_name="claude-test")

    get_model.assert_called_once_with("claude-test")


def test_filter_suggestion_keeps_summary():
    suggestion = ColumnSuggestion(suggested_columns=["B", "Z"], summary="two")
    assert filter_suggestion(suggestion, ["A", "B"]) == ColumnSuggestion(
        suggested_columns=["B"], summary="two"
    )
