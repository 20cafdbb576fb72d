"""
Unit tests for the stream drainer and the shared capture sink.
"""

import io
import threading

import pytest

from benchhost.executor.drainer import CapturedOutput, StreamDrainer, drain


class FailingStream(io.RawIOBase):
    """Stream that yields one chunk and then fails."""

    def __init__(self, first_chunk: bytes):
        self._first_chunk = first_chunk
        self._served = False
        self.closed_by_drainer = False

    def readable(self):
        return True

    def read(self, size=-1):
        if not self._served:
            self._served = True
            return self._first_chunk
        raise OSError("pipe broke")

    def close(self):
        self.closed_by_drainer = True
        super().close()


@pytest.mark.unit
class TestCapturedOutput:
    """Test cases for CapturedOutput."""

    def test_write_appends(self):
        sink = CapturedOutput()
        sink.write(b"abc")
        sink.write(b"def")

        assert sink.getvalue() == b"abcdef"
        assert len(sink) == 6

    def test_decode_replaces_invalid_bytes(self):
        sink = CapturedOutput()
        sink.write(b"ok \xff")

        assert sink.decode("utf-8") == "ok �"

    def test_concurrent_writes_keep_every_byte(self):
        sink = CapturedOutput()

        def writer(byte):
            for _ in range(1000):
                sink.write(byte * 10)

        threads = [threading.Thread(target=writer, args=(b,)) for b in (b"a", b"b")]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        value = sink.getvalue()
        assert value.count(b"a") == 10000
        assert value.count(b"b") == 10000


@pytest.mark.unit
class TestDrain:
    """Test cases for the synchronous drain function."""

    def test_drain_copies_until_eof(self):
        source = io.BytesIO(b"x" * 100_000)
        sink = CapturedOutput()

        copied = drain(source, sink, chunk_size=1024)

        assert copied == 100_000
        assert sink.getvalue() == b"x" * 100_000

    def test_drain_empty_stream(self):
        sink = CapturedOutput()

        assert drain(io.BytesIO(b""), sink) == 0
        assert sink.getvalue() == b""


@pytest.mark.unit
class TestStreamDrainer:
    """Test cases for the StreamDrainer thread."""

    def test_drainer_is_daemon_thread(self):
        drainer = StreamDrainer(io.BytesIO(b""), CapturedOutput())
        assert drainer.daemon is True

    def test_drainer_fills_sink_and_closes_source(self):
        source = io.BytesIO(b"hello drainer")
        sink = CapturedOutput()

        drainer = StreamDrainer(source, sink, name="test-drainer")
        drainer.start()
        drainer.join(timeout=5)

        assert not drainer.is_alive()
        assert sink.getvalue() == b"hello drainer"
        assert drainer.bytes_drained == len(b"hello drainer")
        assert drainer.error is None
        assert source.closed

    def test_drainer_swallows_io_errors(self, caplog):
        source = FailingStream(b"partial")
        sink = CapturedOutput()

        drainer = StreamDrainer(source, sink, name="failing-drainer")
        drainer.start()
        drainer.join(timeout=5)

        assert not drainer.is_alive()
        assert sink.getvalue() == b"partial"
        assert isinstance(drainer.error, OSError)
        assert source.closed_by_drainer
        assert "failing-drainer" in caplog.text

    def test_drainer_on_closed_source_finishes(self):
        source = io.BytesIO(b"data")
        source.close()

        drainer = StreamDrainer(source, CapturedOutput())
        drainer.start()
        drainer.join(timeout=5)

        assert not drainer.is_alive()
        assert isinstance(drainer.error, ValueError)
