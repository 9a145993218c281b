"""Tests for structured logging helpers."""

from oncoshare.core.structured_logging import build_log_context


def test_build_log_context_includes_only_provided_fields():
    context = build_log_context(path="joined", row_count=12, table="ng_states")

    assert context == {
        "query_path": "joined",
        "row_count": 12,
        "table": "ng_states",
    }


def test_build_log_context_keeps_zero_row_count():
    context = build_log_context(path="", row_count=0)

    assert context == {"row_count": 0}
