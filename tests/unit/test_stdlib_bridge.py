"""Tests for parsing standard log lines and forwarding LogRecords."""

from __future__ import annotations

import io
import logging

import pytest

from kvlog.core import levels
from kvlog.core.stdlib_bridge import (
    PATTERN_DEFAULT,
    PATTERN_FULL,
    StdlibAdapter,
    StdlibHandler,
    StdlibPattern,
    enable_stdlib_bridge,
)
from kvlog.plugins.encoders import LogfmtLogger
from kvlog.testing import MockSink, RecordingLogger

_COLONS = "error encoding and sending metric family: write tcp 127.0.0.1:9182->127.0.0.1:60125: wsasend:"

ADAPTER_CASES = [
    # (pattern, input, prefix, join, expected)
    (PATTERN_FULL, "hello", "", False, "msg=hello"),
    (PATTERN_FULL, "2009/01/23: hello", "", False, "ts=2009/01/23 msg=hello"),
    (PATTERN_FULL, "2009/01/23 01:23:23: hello", "", False, 'ts="2009/01/23 01:23:23" msg=hello'),
    (PATTERN_FULL, "01:23:23: hello", "", False, "ts=01:23:23 msg=hello"),
    (
        PATTERN_FULL,
        "2009/01/23 01:23:23.123123: hello",
        "",
        False,
        'ts="2009/01/23 01:23:23.123123" msg=hello',
    ),
    (
        PATTERN_FULL,
        "2009/01/23 01:23:23.123123 /a/b/c/d.go:23: hello",
        "",
        False,
        'ts="2009/01/23 01:23:23.123123" caller=/a/b/c/d.go:23 msg=hello',
    ),
    (
        PATTERN_FULL,
        "2009/01/23 01:23:23.123123 /a/b/c/d.go:23: hello world",
        "",
        False,
        'ts="2009/01/23 01:23:23.123123" caller=/a/b/c/d.go:23 msg="hello world"',
    ),
    (
        PATTERN_FULL,
        "01:23:23.123123 /a/b/c/d.go:23: hello",
        "",
        False,
        "ts=01:23:23.123123 caller=/a/b/c/d.go:23 msg=hello",
    ),
    (
        PATTERN_FULL,
        "2009/01/23 /a/b/c/d.go:23: hello",
        "",
        False,
        "ts=2009/01/23 caller=/a/b/c/d.go:23 msg=hello",
    ),
    (PATTERN_FULL, "/a/b/c/d.go:23: hello", "", False, "caller=/a/b/c/d.go:23 msg=hello"),
    (PATTERN_FULL, "some prefix hello", "some prefix ", False, "msg=hello"),
    (
        PATTERN_FULL,
        "some prefix 2009/01/23 01:23:23: hello",
        "some prefix ",
        False,
        'ts="2009/01/23 01:23:23" msg=hello',
    ),
    (
        PATTERN_FULL,
        "some prefix 01:23:23.123123 /a/b/c/d.go:23: hello",
        "some prefix ",
        False,
        "ts=01:23:23.123123 caller=/a/b/c/d.go:23 msg=hello",
    ),
    (
        PATTERN_FULL,
        "/a/b/c/d.go:23: some prefix hello",
        "some prefix ",
        False,
        "caller=/a/b/c/d.go:23 msg=hello",
    ),
    (PATTERN_FULL, "some prefix hello", "some prefix ", True, 'msg="some prefix hello"'),
    (
        PATTERN_FULL,
        "some prefix 2009/01/23: hello",
        "some prefix ",
        True,
        'ts=2009/01/23 msg="some prefix hello"',
    ),
    (
        PATTERN_FULL,
        "some prefix 2009/01/23 01:23:23.123123 /a/b/c/d.go:23: hello",
        "some prefix ",
        True,
        'ts="2009/01/23 01:23:23.123123" caller=/a/b/c/d.go:23 msg="some prefix hello"',
    ),
    (
        PATTERN_FULL,
        "/a/b/c/d.go:23: some prefix hello",
        "some prefix ",
        True,
        'caller=/a/b/c/d.go:23 msg="some prefix hello"',
    ),
    (PATTERN_DEFAULT, _COLONS, "", False, f'msg="{_COLONS}"'),
    (
        PATTERN_DEFAULT,
        "2023/04/28 07:28:46 " + _COLONS,
        "",
        False,
        f'ts="2023/04/28 07:28:46" msg="{_COLONS}"',
    ),
    (
        PATTERN_DEFAULT,
        "2023/04/28 07:28:46 /a/b/c/d.go:23: " + _COLONS,
        "",
        False,
        f'ts="2023/04/28 07:28:46" msg="/a/b/c/d.go:23: {_COLONS}"',
    ),
    (
        PATTERN_DEFAULT,
        "2009/01/23 01:23:23.123123 /a/b/c/d.go:23: hello",
        "",
        False,
        'ts="2009/01/23 01:23:23.123123" msg="/a/b/c/d.go:23: hello"',
    ),
    (PATTERN_DEFAULT, "1:9182f", "", False, "msg=1:9182f"),
    # Python asctime: dashes and comma fractions
    (
        PATTERN_FULL,
        "2024-03-01 10:11:12,345 app.py:88: started",
        "",
        False,
        'ts="2024-03-01 10:11:12,345" caller=app.py:88 msg=started',
    ),
]


class TestStdlibAdapter:
    @pytest.mark.parametrize(("pattern", "line", "prefix", "join", "expected"), ADAPTER_CASES)
    def test_parse_table(
        self,
        pattern: StdlibPattern,
        line: str,
        prefix: str,
        join: bool,
        expected: str,
    ) -> None:
        sink = MockSink()
        adapter = StdlibAdapter(
            LogfmtLogger(sink),
            pattern=pattern,
            prefix=prefix,
            join_prefix_to_msg=join,
        )
        assert adapter.write(line) == len(line)
        assert sink.data.decode() == expected + "\n"

    def test_trailing_newline_stripped(self) -> None:
        rec = RecordingLogger()
        StdlibAdapter(rec).write("hello\n")
        assert rec.last == ("msg", "hello")

    def test_custom_keys(self) -> None:
        rec = RecordingLogger()
        adapter = StdlibAdapter(
            rec,
            config={"timestamp_key": "time", "file_key": "src", "message_key": "text"},
        )
        adapter.write("2009/01/23 x.py:1: hi")
        assert rec.last == ("time", "2009/01/23", "src", "x.py:1", "text", "hi")

    def test_bytes_input(self) -> None:
        rec = RecordingLogger()
        assert StdlibAdapter(rec).write(b"hi") == 2
        assert rec.last == ("msg", "hi")

    def test_as_stream_handler_target(self) -> None:
        rec = RecordingLogger()
        adapter = StdlibAdapter(rec, pattern=PATTERN_DEFAULT)
        handler = logging.StreamHandler(adapter)  # type: ignore[arg-type]
        handler.setFormatter(logging.Formatter("%(message)s"))
        std = logging.getLogger("tests.stdlib_adapter")
        std.propagate = False
        std.addHandler(handler)
        try:
            std.warning("hello %s", "there")
        finally:
            std.removeHandler(handler)
        assert rec.last == ("msg", "hello there")

    def test_logger_errors_propagate(self) -> None:
        sink = MockSink()
        sink.fail_with(OSError("broken"))
        with pytest.raises(OSError):
            StdlibAdapter(LogfmtLogger(sink)).write("hello")


class TestStdlibHandler:
    def _logger(self, name: str, handler: logging.Handler) -> logging.Logger:
        std = logging.getLogger(name)
        std.handlers = [handler]
        std.propagate = False
        std.setLevel(logging.DEBUG)
        return std

    def test_record_fields(self) -> None:
        rec = RecordingLogger()
        std = self._logger("tests.handler", StdlibHandler(rec))
        std.warning("disk %d%% full", 91, extra={"mount": "/var"})

        kv = rec.last
        assert kv[0] == "ts"
        assert kv[2:4] == ("level", levels.WARN)
        assert kv[4:6] == ("logger", "tests.handler")
        assert kv[6] == "caller"
        assert kv[7].startswith("test_stdlib_bridge.py:")
        assert kv[8:10] == ("msg", "disk 91% full")
        assert kv[10:] == ("mount", "/var")

    @pytest.mark.parametrize(
        ("levelno", "expected"),
        [
            (logging.DEBUG, levels.DEBUG),
            (logging.INFO, levels.INFO),
            (logging.WARNING, levels.WARN),
            (logging.ERROR, levels.ERROR),
            (logging.CRITICAL, levels.ERROR),
        ],
    )
    def test_level_mapping(self, levelno: int, expected: levels.LevelValue) -> None:
        rec = RecordingLogger()
        self._logger("tests.levels", StdlibHandler(rec)).log(levelno, "x")
        assert levels.find_level(rec.last) is expected

    def test_exception_fields(self) -> None:
        rec = RecordingLogger()
        std = self._logger("tests.exc", StdlibHandler(rec))
        try:
            raise KeyError("missing")
        except KeyError:
            std.exception("lookup failed")
        kv = rec.as_dicts()[-1]
        assert kv["error.type"] == "KeyError"
        assert kv["error.message"] == "'missing'"

    def test_kvlog_records_ignored(self) -> None:
        rec = RecordingLogger()
        self._logger("kvlog.stdlib", StdlibHandler(rec)).info("loop")
        assert rec.records == []

    def test_failures_go_to_handle_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        sink = MockSink()
        sink.fail_with(OSError("down"))
        handler = StdlibHandler(LogfmtLogger(sink))
        seen: list[logging.LogRecord] = []
        monkeypatch.setattr(handler, "handleError", seen.append)
        self._logger("tests.fail", handler).error("x")
        assert len(seen) == 1

    def test_enable_stdlib_bridge(self) -> None:
        rec = RecordingLogger()
        target = logging.getLogger("tests.bridge")
        target.addHandler(logging.StreamHandler(io.StringIO()))
        target.propagate = False
        handler = enable_stdlib_bridge(
            rec,
            level=logging.DEBUG,
            remove_existing_handlers=True,
            logger_name="tests.bridge",
        )
        try:
            assert target.handlers == [handler]
            target.debug("bridged")
            assert rec.as_dicts()[-1]["msg"] == "bridged"
        finally:
            target.removeHandler(handler)
