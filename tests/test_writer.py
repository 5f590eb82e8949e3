"""
Unit tests for writer.py
"""

import io
import threading
from unittest import mock

import pytest

from mysqldumper.writer import BUFFER_SIZE, BufferedSink, StreamingRowWriter


class RecordingStream(io.StringIO):
    """StringIO that records every write and flush call."""

    def __init__(self):
        super().__init__()
        self.writes = []
        self.flushes = 0

    def write(self, text):
        self.writes.append(text)
        return super().write(text)

    def flush(self):
        self.flushes += 1
        super().flush()


class TestBufferedSink:
    """Tests for BufferedSink class."""

    def test_default_size(self):
        sink = BufferedSink(io.StringIO())
        assert sink.size == BUFFER_SIZE == 1 << 20

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            BufferedSink(io.StringIO(), size=0)

    def test_write_is_buffered(self):
        stream = RecordingStream()
        sink = BufferedSink(stream, size=16)

        assert sink.write("hello") == 5
        assert stream.writes == []
        assert sink.buffered == 5
        assert sink.available == 11

    def test_overflow_flushes_first(self):
        stream = RecordingStream()
        sink = BufferedSink(stream, size=8)

        sink.write("abcde")
        sink.write("fghij")

        assert stream.writes == ["abcde"]
        assert sink.buffered == 5

    def test_exact_fit_does_not_flush(self):
        stream = RecordingStream()
        sink = BufferedSink(stream, size=8)

        sink.write("abcd")
        sink.write("efgh")

        assert stream.writes == []

    def test_oversized_write_goes_straight_through(self):
        stream = RecordingStream()
        sink = BufferedSink(stream, size=4)

        sink.write("ab")
        sink.write("0123456789")

        assert stream.writes == ["ab", "0123456789"]
        assert sink.buffered == 0

    def test_flush_is_idempotent(self):
        stream = RecordingStream()
        sink = BufferedSink(stream, size=16)

        sink.write("data")
        sink.flush()
        sink.flush()

        assert stream.writes == ["data"]
        assert stream.getvalue() == "data"

    def test_context_manager_flushes(self):
        stream = io.StringIO()
        with BufferedSink(stream) as sink:
            sink.write("USE `shop`;\n")
        assert stream.getvalue() == "USE `shop`;\n"

    def test_context_manager_flushes_on_error(self):
        stream = io.StringIO()
        with pytest.raises(RuntimeError):
            with BufferedSink(stream) as sink:
                sink.write("partial")
                raise RuntimeError("boom")
        assert stream.getvalue() == "partial"

    def test_order_preserved(self):
        stream = io.StringIO()
        sink = BufferedSink(stream, size=10)
        parts = [f"{i};" for i in range(100)]
        for part in parts:
            sink.write(part)
        sink.flush()
        assert stream.getvalue() == "".join(parts)


class TestStreamingRowWriter:
    """Tests for StreamingRowWriter class."""

    def test_writes_in_order_before_flush(self):
        stream = RecordingStream()
        sink = BufferedSink(stream)
        statements = [f"INSERT INTO `t` VALUES ({i});\n" for i in range(500)]

        with StreamingRowWriter(sink) as writer:
            for statement in statements:
                writer.send(statement)

        assert stream.getvalue() == "".join(statements)
        assert writer.written == 500
        assert sink.buffered == 0

    def test_finish_flushes_last_row(self):
        """The terminal flush never overtakes the final send."""
        for _ in range(50):
            stream = io.StringIO()
            sink = BufferedSink(stream)
            writer = StreamingRowWriter(sink).start()
            writer.send("a;\n")
            writer.send("b;\n")
            writer.finish()
            assert stream.getvalue() == "a;\nb;\n"

    def test_finish_without_rows(self):
        stream = RecordingStream()
        writer = StreamingRowWriter(BufferedSink(stream)).start()
        writer.finish()
        assert stream.getvalue() == ""
        assert stream.flushes == 1

    def test_runs_in_separate_thread(self):
        sink = mock.MagicMock()
        threads = []
        sink.write.side_effect = lambda text: threads.append(threading.current_thread())

        with StreamingRowWriter(sink, name="row-writer-users") as writer:
            writer.send("x")

        assert threads[0] is not threading.current_thread()
        assert threads[0].name == "row-writer-users"

    def test_send_before_start(self):
        writer = StreamingRowWriter(BufferedSink(io.StringIO()))
        with pytest.raises(RuntimeError):
            writer.send("x")

    def test_start_twice(self):
        writer = StreamingRowWriter(BufferedSink(io.StringIO())).start()
        try:
            with pytest.raises(RuntimeError):
                writer.start()
        finally:
            writer.finish()

    def test_sink_error_surfaces(self):
        sink = mock.MagicMock()
        sink.write.side_effect = OSError("disk full")

        writer = StreamingRowWriter(sink).start()
        with pytest.raises(OSError, match="disk full"):
            for _ in range(10):
                writer.send("row")
            writer.finish()

    def test_context_manager_stops_consumer_on_error(self):
        stream = io.StringIO()
        sink = BufferedSink(stream)

        with pytest.raises(ValueError):
            with StreamingRowWriter(sink) as writer:
                writer.send("first;\n")
                raise ValueError("bad row")

        assert not writer._thread.is_alive()
        assert stream.getvalue() == "first;\n"
