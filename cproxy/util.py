from io import RawIOBase, UnsupportedOperation
from typing import BinaryIO, Callable


class WriterError(Exception):
    """
    Raised by `Tee` when its writer fails, so callers can tell that apart from
    the reader failing. The `OSError` is the `__cause__`.
    """


class Tee(RawIOBase):
    """
    Wraps a reader so that every chunk read from it is also written to `writer`.

    The writer is flushed after every chunk. `on_complete` is called once the
    reader reports end of stream. Closing the tee closes neither stream: the
    reader belongs to whoever opened it, and the writer is usually shared
    (e.g., standard output).
    """

    def __init__(self, reader: BinaryIO, writer: BinaryIO, on_complete: Callable[[], None]) -> None:
        self.__reader = reader
        self.__writer = writer
        self.__on_complete = on_complete
        self.__complete = False

    def _write_chunk(self, chunk: bytes) -> bytes:
        if chunk:
            try:
                self.__writer.write(chunk)
                self.__writer.flush()
            except OSError as e:
                raise WriterError(str(e)) from e
        elif not self.__complete:
            # Indicates EOF was reached in the reader.
            self.__complete = True
            self.__on_complete()
        return chunk

    # region IOBase methods

    def close(self) -> None:
        pass

    @property
    def closed(self) -> bool:
        return self.__reader.closed

    def fileno(self) -> int:
        raise OSError()

    def flush(self) -> None:
        self.__writer.flush()

    def isatty(self) -> bool:
        return False

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return False

    def writable(self) -> bool:
        return False

    # endregion

    # region RawIOBase methods

    def read(self, size=-1) -> bytes:
        return self._write_chunk(self.__reader.read(size))

    def readinto(self, buffer):
        # Chunks are handed out by `read()` only.
        raise UnsupportedOperation()

    def write(self, b):
        raise UnsupportedOperation()

    # endregion
