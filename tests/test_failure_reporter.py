"""
Tests for the failure reporter.

This module tests local diagnostic rendering, report aggregation, sink
forwarding, reporting context, and the fatal exception path.
"""

import asyncio
import io
from typing import Any, Dict, List

import pytest

from ignition.core.exceptions import SyntheticReportError
from ignition.infrastructure.config.models import ProcessSettings
from ignition.infrastructure.reporting.fatal import FatalHandlerRegistry
from ignition.infrastructure.reporting.reporter import FailureReporter
from ignition.infrastructure.reporting.sinks import InMemorySink


class TestFailureReporter:
    """Test cases for FailureReporter."""

    @pytest.fixture
    def environ(self) -> Dict[str, str]:
        return {}

    @pytest.fixture
    def settings(self, environ: Dict[str, str]) -> ProcessSettings:
        return ProcessSettings.from_environ(environ)

    @pytest.fixture
    def sink(self) -> InMemorySink:
        return InMemorySink()

    @pytest.fixture
    def trapped(self) -> List[Any]:
        return []

    @pytest.fixture
    def registry(self, trapped: List[Any]) -> FatalHandlerRegistry:
        return FatalHandlerRegistry(trap=trapped.append)

    @pytest.fixture
    def exit_codes(self) -> List[int]:
        return []

    @pytest.fixture
    def stream(self) -> io.StringIO:
        return io.StringIO()

    @pytest.fixture
    def reporter(self, sink: InMemorySink, settings: ProcessSettings,
                 registry: FatalHandlerRegistry, exit_codes: List[int],
                 stream: io.StringIO) -> FailureReporter:
        return FailureReporter(
            sink=sink,
            settings=settings,
            context={'environment': 'default', 'worker_type': 'master'},
            registry=registry,
            terminate=exit_codes.append,
            stream=stream
        )

    @pytest.mark.asyncio
    async def test_report_nothing(self, reporter: FailureReporter) -> None:
        report = await reporter.report()

        assert report.error is None
        assert report.metadata == {}
        assert report.reported is False
        assert report.event_id is None

    @pytest.mark.asyncio
    async def test_report_separates_error_and_metadata(self, reporter: FailureReporter) -> None:
        error = ValueError("THIS IS ONLY A TEST")

        report = await reporter.report({}, "a", 1, True, [], error)

        assert report.error is error
        assert report.metadata == {'arg0': {}, 'arg1': "a", 'arg2': 1, 'arg3': True, 'arg4': []}
        assert report.reported is False

    @pytest.mark.asyncio
    async def test_first_error_is_primary(self, reporter: FailureReporter) -> None:
        first, second = RuntimeError("first"), RuntimeError("second")

        report = await reporter.report(first, second)

        assert report.error is first
        assert report.metadata == {'arg1': second}

    @pytest.mark.asyncio
    async def test_disabled_reporter_does_not_synthesize(self, reporter: FailureReporter,
                                                         sink: InMemorySink) -> None:
        report = await reporter.report("just a note")

        assert report.error is None
        assert sink.captures == []

    @pytest.mark.asyncio
    async def test_renders_diagnostic_block(self, reporter: FailureReporter,
                                            stream: io.StringIO) -> None:
        await reporter.report("What I was doing?", KeyError("missing"))

        output = stream.getvalue()
        assert "[ REPORT ]" in output
        assert "'What I was doing?'" in output
        assert "KeyError" in output
        assert "Reported By:" in output
        assert "test_renders_diagnostic_block" in output

    @pytest.mark.asyncio
    async def test_silenced_reporter_renders_nothing(self, reporter: FailureReporter,
                                                     environ: Dict[str, str],
                                                     stream: io.StringIO) -> None:
        environ["SILENCE_REPORTS"] = "true"

        report = await reporter.report("Best to be seen and not heard")

        assert stream.getvalue() == ""
        assert report.metadata == {'arg0': "Best to be seen and not heard"}

    @pytest.mark.asyncio
    async def test_enabled_reporter_synthesizes_error(self, reporter: FailureReporter,
                                                      sink: InMemorySink) -> None:
        reporter.enable_reporting(True)

        report = await reporter.report(1, "Generate unit test error for me")

        assert isinstance(report.error, SyntheticReportError)
        assert str(report.error) == "Report: Generate unit test error for me"
        assert report.reported is True
        assert report.event_id == "event-1"
        assert sink.captures[0][0] is report.error

    @pytest.mark.asyncio
    async def test_placeholder_name_without_strings(self, reporter: FailureReporter) -> None:
        reporter.enable_reporting(True)

        report = await reporter.report(1, "", {"a": 1})

        assert str(report.error) == "Report: ???"

    @pytest.mark.asyncio
    async def test_sink_payload_carries_context_and_stack(self, reporter: FailureReporter,
                                                          sink: InMemorySink) -> None:
        reporter.enable_reporting(True)
        reporter.set_context({'request_id': "abc"})
        error = RuntimeError("Hand rolled error")

        report = await reporter.report("What I was doing?", error)

        captured_error, payload = sink.captures[0]
        assert captured_error is error
        extra = payload['extra']
        assert extra['arg0'] == "What I was doing?"
        assert extra['environment'] == "default"
        assert extra['worker_type'] == "master"
        assert extra['request_id'] == "abc"
        assert extra['report_stack'].startswith("Reported By:")
        # The returned metadata only holds the inputs
        assert report.metadata == {'arg0': "What I was doing?"}

    @pytest.mark.asyncio
    async def test_sink_failure_is_swallowed(self, reporter: FailureReporter,
                                             sink: InMemorySink) -> None:
        reporter.enable_reporting(True)
        sink.fail_with(ConnectionError("sink unreachable"))

        report = await reporter.report("still returns")

        assert report.reported is False
        assert report.event_id is None
        health = await reporter.check_health()
        assert health['details']['sink_failures'] == 1
        assert health['healthy'] is False

    def test_set_context_last_write_wins(self, reporter: FailureReporter) -> None:
        reporter.set_context({'worker': "unit tests!"})
        reporter.set_context({'worker': "second", 'extra': 1})

        context = reporter.context
        assert context['worker'] == "second"
        assert context['extra'] == 1
        assert context['environment'] == "default"

    def test_context_property_is_a_copy(self, reporter: FailureReporter) -> None:
        reporter.context['injected'] = True

        assert 'injected' not in reporter.context

    def test_enable_reporting_installs_handler_once(self, reporter: FailureReporter,
                                                    trapped: List[Any]) -> None:
        reporter.enable_reporting(True)
        reporter.enable_reporting(True)

        assert reporter.enabled is True
        assert len(trapped) == 1
        assert trapped[0] == reporter.handle_uncaught_exception

    def test_disable_reporting(self, reporter: FailureReporter, trapped: List[Any]) -> None:
        reporter.enable_reporting(False)

        assert reporter.enabled is False
        assert trapped == []

    def test_handler_shared_across_reporters(self, registry: FatalHandlerRegistry,
                                             trapped: List[Any], settings: ProcessSettings) -> None:
        first = FailureReporter(sink=InMemorySink(), settings=settings, registry=registry)
        second = FailureReporter(sink=InMemorySink(), settings=settings, registry=registry)

        first.enable_reporting(True)
        second.enable_reporting(True)

        assert len(trapped) == 1

    def test_uncaught_exception_reports_and_exits(self, reporter: FailureReporter,
                                                  sink: InMemorySink, exit_codes: List[int],
                                                  stream: io.StringIO) -> None:
        error = RuntimeError("Fall down go boom")

        reporter.handle_uncaught_exception(error)

        assert "[ FATAL EXCEPTION ]" in stream.getvalue()
        assert "Fall down go boom" in stream.getvalue()
        assert sink.captures[0][0] is error
        assert sink.captures[0][1]['extra']['environment'] == "default"
        assert exit_codes == [1]

    def test_uncaught_exception_without_exit(self, reporter: FailureReporter,
                                             exit_codes: List[int]) -> None:
        event_id = reporter.handle_uncaught_exception(
            RuntimeError("testing - do not exit"), exit_after_report=False)

        assert event_id == "event-1"
        assert exit_codes == []

    def test_uncaught_exception_exits_when_sink_fails(self, reporter: FailureReporter,
                                                      sink: InMemorySink,
                                                      exit_codes: List[int]) -> None:
        sink.fail_with(ConnectionError("sink unreachable"))

        reporter.handle_uncaught_exception(RuntimeError("boom"))

        assert exit_codes == [1]

    def test_fatal_banner_ignores_silence(self, reporter: FailureReporter,
                                          environ: Dict[str, str],
                                          stream: io.StringIO) -> None:
        environ["SILENCE_REPORTS"] = "1"

        reporter.handle_uncaught_exception(RuntimeError("loud"), exit_after_report=False)

        assert "[ FATAL EXCEPTION ]" in stream.getvalue()

    @pytest.mark.asyncio
    async def test_uncaught_exception_inside_running_loop(self, reporter: FailureReporter,
                                                          sink: InMemorySink) -> None:
        event_id = reporter.handle_uncaught_exception(
            RuntimeError("from a coroutine"), exit_after_report=False)

        assert event_id == "event-1"
        assert len(sink.captures) == 1

    def test_watch_event_loop(self, reporter: FailureReporter, sink: InMemorySink,
                              exit_codes: List[int]) -> None:
        loop = asyncio.new_event_loop()
        error = RuntimeError("task blew up")
        try:
            reporter.watch_event_loop(loop)
            loop.call_exception_handler({'message': "Task exception was never retrieved",
                                         'exception': error})
        finally:
            loop.close()

        assert sink.captures[0][0] is error
        assert exit_codes == [1]

    @pytest.mark.asyncio
    async def test_default_sink_is_logging_sink(self, settings: ProcessSettings,
                                                registry: FatalHandlerRegistry,
                                                stream: io.StringIO) -> None:
        reporter = FailureReporter(settings=settings, registry=registry, stream=stream)
        reporter.enable_reporting(True)

        report = await reporter.report("goes to the log")

        assert report.reported is True
        assert isinstance(report.event_id, str)
