"""
Tests for reporting sinks.
"""

import pytest

from ignition.infrastructure.reporting.sinks import InMemorySink, LoggingSink


class TestLoggingSink:
    """Test cases for LoggingSink."""

    @pytest.mark.asyncio
    async def test_returns_unique_event_ids(self) -> None:
        sink = LoggingSink(environment="dev", tags={'worker_type': "api"})

        first = await sink.capture_exception(RuntimeError("a"), {'extra': {}})
        second = await sink.capture_exception(RuntimeError("b"), {'extra': {}})

        assert first and second
        assert first != second

    @pytest.mark.asyncio
    async def test_logs_capture(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level("ERROR", logger="ignition.infrastructure.reporting.sinks")
        sink = LoggingSink()

        await sink.capture_exception(KeyError("key"), {'extra': {'arg0': 1}})

        assert any("KeyError" in r.getMessage() for r in caplog.records)


class TestInMemorySink:
    """Test cases for InMemorySink."""

    @pytest.mark.asyncio
    async def test_records_captures(self) -> None:
        sink = InMemorySink()
        error = RuntimeError("x")

        event_id = await sink.capture_exception(error, {'extra': {'k': 'v'}})

        assert event_id == "event-1"
        assert sink.captures == [(error, {'extra': {'k': 'v'}})]

    @pytest.mark.asyncio
    async def test_fail_with(self) -> None:
        sink = InMemorySink()
        sink.fail_with(ConnectionError("down"))

        with pytest.raises(ConnectionError):
            await sink.capture_exception(RuntimeError("x"), {})

        sink.fail_with(None)
        assert await sink.capture_exception(RuntimeError("x"), {}) == "event-1"
