"""
Output draining for child processes.

A child that fills one of its pipes blocks until somebody reads it. The
drainer in this module reads a single pipe to end-of-stream on its own
thread, so a parent waiting for the child can never deadlock on a full
pipe buffer.
"""

import logging
import threading
from typing import BinaryIO, Optional

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 8192


class CapturedOutput:
    """
    Append-only byte sink shared by the drainers of one process.

    Writes are serialized by a lock. Chunks from different drainers are
    kept whole, but their relative order is whatever the scheduler made it.
    """

    def __init__(self):
        self._buffer = bytearray()
        self._lock = threading.Lock()

    def write(self, data: bytes) -> int:
        with self._lock:
            self._buffer.extend(data)
        return len(data)

    def getvalue(self) -> bytes:
        with self._lock:
            return bytes(self._buffer)

    def decode(self, encoding: str, errors: str = "replace") -> str:
        return self.getvalue().decode(encoding, errors)

    def __len__(self) -> int:
        with self._lock:
            return len(self._buffer)


def drain(source: BinaryIO, sink: CapturedOutput, chunk_size: int = DEFAULT_CHUNK_SIZE) -> int:
    """
    Copy everything from source into sink until end-of-stream.

    Args:
        source: Readable binary stream, usually a pipe of a child process
        sink: Destination for the bytes read
        chunk_size: Maximum number of bytes per read call

    Returns:
        Number of bytes copied

    Raises:
        OSError, ValueError: If reading fails (StreamDrainer absorbs these)
    """
    # read1() returns as soon as some bytes are available instead of
    # waiting for a full chunk.
    read = getattr(source, "read1", None) or source.read
    total = 0
    while True:
        chunk = read(chunk_size)
        if not chunk:
            return total
        sink.write(chunk)
        total += len(chunk)


class StreamDrainer(threading.Thread):
    """
    Thread that drains one stream into a shared sink.

    I/O errors end the thread without being raised to the owner: losing
    late diagnostic output is preferable to hanging or crashing the caller.
    The error is logged and kept on ``error`` for inspection. The source is
    closed once draining ends.
    """

    def __init__(
        self,
        source: BinaryIO,
        sink: CapturedOutput,
        name: Optional[str] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        super().__init__(name=name, daemon=True)
        self.source = source
        self.sink = sink
        self.chunk_size = chunk_size
        self.bytes_drained = 0
        self.error: Optional[BaseException] = None

    def run(self) -> None:
        try:
            self.bytes_drained = drain(self.source, self.sink, self.chunk_size)
        except (OSError, ValueError) as e:
            self.error = e
            logger.warning(
                f"Drainer {self.name} stopped after {len(self.sink)} bytes: "
                f"{type(e).__name__}: {e}"
            )
        finally:
            try:
                self.source.close()
            except OSError as e:
                logger.debug(f"Drainer {self.name} could not close its source: {e}")
