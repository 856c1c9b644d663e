"""
Shared logger lifecycle tests.
"""

from __future__ import annotations

import threading
from pathlib import Path

import pytest

import ratelog
from ratelog import lifecycle
from ratelog.config.logging import LoggingSettings
from ratelog.exceptions import AlreadyInitialized, NotInitialized, TargetNotFound, TargetTypeMismatch
from ratelog.logging.sinks import FileSink, StdioSink
from ratelog.severity import Severity


def _file_settings(tmp_path: Path, **overrides) -> LoggingSettings:
    values = dict(
        sinks="stdio,file",
        file_path=str(tmp_path / "logs" / "app.log"),
        file_target="file",
        source_root=str(tmp_path),
    )
    values.update(overrides)
    return LoggingSettings(**values)


class TestInitialize:
    def test_current_instance_before_initialize_fails(self) -> None:
        with pytest.raises(NotInitialized):
            lifecycle.current_instance()

    def test_initialize_twice_fails(self, backend) -> None:
        lifecycle.initialize(backend=backend)
        with pytest.raises(AlreadyInitialized):
            lifecycle.initialize(backend=backend)

    def test_initialize_returns_the_shared_instance(self, backend) -> None:
        log = lifecycle.initialize(Severity.WARN, backend=backend)
        assert lifecycle.current_instance() is log
        assert log.console_threshold is Severity.WARN
        assert lifecycle.is_initialized()

    def test_default_threshold_is_error(self, backend) -> None:
        log = lifecycle.initialize(backend=backend, settings=LoggingSettings())
        assert log.console_threshold is Severity.ERROR

    def test_settings_build_the_backend(self, tmp_path: Path) -> None:
        log = lifecycle.initialize(settings=_file_settings(tmp_path, console_threshold="info", fatal_cap_default=2))
        sinks = log.backend.sinks
        assert isinstance(sinks["stdio"], StdioSink)
        assert isinstance(sinks["file"], FileSink)
        assert log.console_threshold is Severity.INFO
        assert log.source_root == tmp_path

    def test_reinitialize_after_shutdown(self, backend) -> None:
        first = lifecycle.initialize(backend=backend)
        lifecycle.shutdown()
        second = lifecycle.initialize(backend=backend)
        assert second is not first

    def test_concurrent_initialize_creates_one_instance(self, backend) -> None:
        results: list[object] = []
        start = threading.Barrier(8)

        def worker() -> None:
            start.wait()
            try:
                results.append(lifecycle.initialize(backend=backend))
            except AlreadyInitialized as exc:
                results.append(exc)

        pool = [threading.Thread(target=worker) for _ in range(8)]
        for t in pool:
            t.start()
        for t in pool:
            t.join()

        loggers = [r for r in results if not isinstance(r, AlreadyInitialized)]
        assert len(loggers) == 1
        assert loggers[0] is lifecycle.current_instance()


class TestShutdown:
    def test_shutdown_flushes_and_forgets(self, backend, sink) -> None:
        lifecycle.initialize(backend=backend)
        lifecycle.shutdown()
        assert sink.flushes == 1
        assert sink.closed
        with pytest.raises(NotInitialized):
            lifecycle.current_instance()

    def test_shutdown_without_initialize_fails(self) -> None:
        with pytest.raises(NotInitialized):
            lifecycle.shutdown()

    def test_stale_reference_refuses_to_log(self, backend) -> None:
        stale = lifecycle.initialize(backend=backend)
        lifecycle.shutdown()
        with pytest.raises(NotInitialized):
            stale.error("after shutdown")


class TestLogFilePath:
    def test_query_without_logger_fails(self) -> None:
        with pytest.raises(NotInitialized):
            lifecycle.get_log_file_path()

    def test_resolves_configured_file_target(self, tmp_path: Path) -> None:
        log = lifecycle.initialize(settings=_file_settings(tmp_path))
        log.info("written")
        assert lifecycle.get_log_file_path() == tmp_path / "logs" / "app.log"

    def test_unknown_and_non_file_targets(self, tmp_path: Path) -> None:
        lifecycle.initialize(settings=_file_settings(tmp_path))
        with pytest.raises(TargetNotFound):
            lifecycle.get_log_file_path("missing")
        with pytest.raises(TargetTypeMismatch):
            lifecycle.get_log_file_path("stdio")


class TestEndToEnd:
    def test_warn_threshold_scenario(self, backend, sink, capsys) -> None:
        log = ratelog.initialize(Severity.WARN, backend=backend)

        log.info("x")
        assert capsys.readouterr().out == ""
        assert sink.severities == ["INFO"]

        log.error_console("y")
        assert capsys.readouterr().out == "ERROR :y\n"
        assert sink.severities[-1] == "ERROR"

        for _ in range(3):
            log.fatal_capped(2, "z")
        assert capsys.readouterr().out.splitlines() == ["FATAL :z", "FATAL :z", "ERROR :z"]
        assert sink.severities[-3:] == ["FATAL", "FATAL", "ERROR"]

        ratelog.shutdown()
        assert not ratelog.is_initialized()
