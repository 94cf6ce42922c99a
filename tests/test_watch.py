"""Tests for watch() and watch_file()."""

import logging
import os
import threading

from livejson import watch, watch_file


def _touch(path, text):
    path.write_text(text)
    stat = os.stat(path)
    os.utime(path, ns=(stat.st_atime_ns, stat.st_mtime_ns + 2_000_000_000))


class TestWatch:
    """watch() runs a function in a daemon thread."""

    def test_function_runs(self):
        ran = threading.Event()
        watch(lambda handle: ran.set())
        assert ran.wait(timeout=2)

    def test_dispose_flag(self):
        handle = watch(lambda handle: None)
        assert not handle.disposed
        handle.dispose()
        assert handle.disposed
        handle.dispose()  # idempotent

    def test_poll_loop_exits_on_dispose(self):
        """Typical polling pattern: loop until disposed."""
        exited = threading.Event()

        def poll(handle):
            while not handle.wait(0.01):
                pass
            exited.set()

        handle = watch(poll)
        assert not exited.is_set()
        handle.dispose()
        assert exited.wait(timeout=2)


class TestWatchFile:
    def test_reports_modification(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text("{}")
        seen = []
        done = threading.Event()

        def on_change(mtime):
            seen.append(mtime)
            done.set()

        handle = watch_file(path, on_change, interval=0.01, debounce=0.02)
        try:
            _touch(path, '{"a": 1}')
            assert done.wait(timeout=5)
            assert seen[0] == os.stat(path).st_mtime_ns
        finally:
            handle.dispose()

    def test_reports_creation(self, tmp_path):
        path = tmp_path / "later.json"
        done = threading.Event()
        handle = watch_file(path, lambda mtime: done.set(), interval=0.01, debounce=0)
        try:
            path.write_text("{}")
            assert done.wait(timeout=5)
        finally:
            handle.dispose()

    def test_callback_errors_are_logged(self, tmp_path, caplog):
        path = tmp_path / "data.json"
        path.write_text("{}")
        done = threading.Event()

        def boom(mtime):
            done.set()
            raise RuntimeError("boom")

        with caplog.at_level(logging.ERROR, logger="livejson.watch"):
            handle = watch_file(path, boom, interval=0.01, debounce=0)
            try:
                _touch(path, "[]")
                assert done.wait(timeout=5)
                handle.wait(0.2)
            finally:
                handle.dispose()
        assert "File watch callback failed" in caplog.text

    def test_dispose_stops_reporting(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text("{}")
        seen = []
        handle = watch_file(path, seen.append, interval=0.01, debounce=0)
        handle.dispose()
        _touch(path, "[]")
        threading.Event().wait(0.1)
        assert seen == []
