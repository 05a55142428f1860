"""
Tests for RunContext.
"""

import logging
import re

import pytest

from netinventory.core.context import (
    RunContext,
    RunContextFilter,
    get_current_context,
    set_current_context,
)


@pytest.fixture
def reset_context():
    yield
    set_current_context(None)


@pytest.mark.unit
class TestRunContext:
    """Тесты RunContext."""

    def test_timestamp_id(self):
        ctx = RunContext.create(triggered_by="cron")
        assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}", ctx.run_id)
        assert ctx.triggered_by == "cron"

    def test_uuid_id(self):
        ctx = RunContext.create(use_timestamp_id=False)
        assert len(ctx.run_id) == 8
        assert ctx.triggered_by == "poller"

    def test_log_prefix(self):
        ctx = RunContext.create(triggered_by="test")
        assert ctx.log_prefix() == f"[{ctx.run_id}]"
        assert str(ctx) == f"RunContext({ctx.run_id})"

    def test_to_dict(self):
        ctx = RunContext.create(triggered_by="manual")
        data = ctx.to_dict()
        assert data["run_id"] == ctx.run_id
        assert data["triggered_by"] == "manual"
        assert data["elapsed_seconds"] >= 0
        assert data["extra"] == {}


@pytest.mark.unit
class TestCurrentContext:
    """Тесты глобального контекста и logging filter."""

    def test_set_get(self, reset_context):
        ctx = RunContext.create(triggered_by="test")
        set_current_context(ctx)
        assert get_current_context() is ctx

    def test_filter_with_context(self, reset_context):
        ctx = RunContext.create(triggered_by="test")
        set_current_context(ctx)
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", (), None)
        assert RunContextFilter().filter(record) is True
        assert record.run_id == ctx.run_id

    def test_filter_without_context(self, reset_context):
        set_current_context(None)
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", (), None)
        RunContextFilter().filter(record)
        assert record.run_id == "-"
