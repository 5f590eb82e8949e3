"""
Buffered output for SQL dumps.
"""

import logging
import queue
import threading
from dataclasses import dataclass
from typing import Optional, TextIO, Union

BUFFER_SIZE = 1 << 20


class BufferedSink:
    """Fixed-capacity text buffer in front of an output stream.

    Text is accumulated in memory and handed to the destination only when
    the next write would not fit, or on flush().
    """

    def __init__(self, destination: TextIO, size: int = BUFFER_SIZE):
        if size <= 0:
            raise ValueError(f"Buffer size must be positive, got {size}")
        self.destination = destination
        self.size = size
        self._chunks: list[str] = []
        self._buffered = 0

    def __enter__(self) -> "BufferedSink":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.flush()

    @property
    def available(self) -> int:
        """Remaining capacity of the buffer."""
        return self.size - self._buffered

    @property
    def buffered(self) -> int:
        return self._buffered

    def write(self, text: str) -> int:
        """Buffer text, flushing first when it does not fit."""
        if self.available < len(text):
            self.flush()
        if len(text) > self.size:
            self.destination.write(text)
            return len(text)
        self._chunks.append(text)
        self._buffered += len(text)
        return len(text)

    def flush(self) -> None:
        """Write out buffered text. Safe to call repeatedly."""
        if self._chunks:
            self.destination.write(''.join(self._chunks))
            self._chunks = []
            self._buffered = 0
        if hasattr(self.destination, 'flush'):
            self.destination.flush()


@dataclass(frozen=True)
class Data:
    """A statement to be written."""
    text: str


class Done:
    """End of stream marker."""


DONE = Done()


class StreamingRowWriter:
    """Writes formatted statements to a sink from a dedicated thread.

    Statements and the end marker travel through one FIFO queue with a
    single slot, so every statement sent before finish() is written before
    the sink is flushed.
    """

    def __init__(self, sink: BufferedSink, name: str = "row-writer"):
        self.sink = sink
        self.name = name
        self._queue: "queue.Queue[Union[Data, Done]]" = queue.Queue(maxsize=1)
        self._thread: Optional[threading.Thread] = None
        self._error: Optional[BaseException] = None
        self.written = 0

    def __enter__(self) -> "StreamingRowWriter":
        return self.start()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._thread is None:
            return
        if exc_type is None:
            self.finish()
        else:
            # Already failing: stop the consumer without masking the error
            try:
                self.finish()
            except Exception as e:
                logging.debug(f"Row writer '{self.name}' failed during shutdown: {e}")

    def start(self) -> "StreamingRowWriter":
        """Start the consumer thread."""
        if self._thread is not None:
            raise RuntimeError(f"Row writer '{self.name}' already started")
        self._thread = threading.Thread(target=self._consume, name=self.name, daemon=True)
        self._thread.start()
        return self

    def send(self, text: str) -> None:
        """Hand one statement to the consumer, blocking while the slot is full."""
        if self._thread is None:
            raise RuntimeError(f"Row writer '{self.name}' is not running")
        self._raise_if_failed()
        while True:
            try:
                self._queue.put(Data(text), timeout=0.1)
                return
            except queue.Full:
                self._raise_if_failed()

    def finish(self) -> None:
        """Signal completion and wait until the consumer has flushed."""
        if self._thread is None:
            raise RuntimeError(f"Row writer '{self.name}' is not running")
        if self._thread.is_alive():
            while self._thread.is_alive():
                try:
                    self._queue.put(DONE, timeout=0.1)
                    break
                except queue.Full:
                    continue
            self._thread.join()
        self._raise_if_failed()

    def _consume(self) -> None:
        try:
            while True:
                item = self._queue.get()
                if isinstance(item, Done):
                    self.sink.flush()
                    return
                self.sink.write(item.text)
                self.written += 1
        except BaseException as e:
            self._error = e

    def _raise_if_failed(self) -> None:
        if self._error is not None:
            raise self._error
