import logging
from contextlib import ExitStack
from pathlib import Path
from typing import BinaryIO, Callable, Optional

from .cache import ensure_parent_directories
from .errors import FetchError, LiveOutputError, LocalIOError, StreamReadError
from .model import CHUNK_SIZE, DirectoryResult, Status, StreamState
from .util import Tee, WriterError


logger = logging.getLogger(__name__)

ACCEPTED_STATUS_LINES = (b'HTTP/1.0 200 ', b'HTTP/1.1 200 ')
# Shorter first chunks are not classified at all, and default to accepted.
MINIMUM_CLASSIFIABLE = 15
HEADER_TERMINATOR = b'\r\n\r\n'
REPLAY_STATUS = 'HTTP/1.0 200 OK\r\nContent-Length: {}\r\n\r\n'


def classify(first_chunk: bytes) -> Status:
    if len(first_chunk) < MINIMUM_CLASSIFIABLE:
        return Status.ACCEPTED
    if first_chunk.startswith(ACCEPTED_STATUS_LINES):
        return Status.ACCEPTED
    return Status.REJECTED


def find_body_start(state: StreamState, chunk: bytes) -> Optional[int]:
    """
    Find where the body starts within `chunk`, updating `state`.

    The search also covers the tail of the previous chunk, so a terminator
    split across two reads is found. Once the boundary has been seen, every
    later chunk is body from its first byte.

    @return
      The offset of the first body byte in `chunk`, or `None` if the chunk is
      entirely headers.
    """
    if state.boundary_found:
        return 0

    window = state.tail + chunk
    index = window.find(HEADER_TERMINATOR)
    if index == -1:
        state.tail = window[-(len(HEADER_TERMINATOR) - 1):]
        return None

    state.boundary_found = True
    state.tail = b''
    return index + len(HEADER_TERMINATOR) - (len(window) - len(chunk))


class ResponseStreamer:
    """
    Streams a response to the live output and materializes its body in the cache.

    Nothing is buffered beyond one chunk: each chunk is echoed, then the part
    of it that belongs to the body is appended to the cache file.
    """

    def __init__(self,
                 output: BinaryIO,
                 chunk_size: int = CHUNK_SIZE,
                 ensure_directories: Callable[[Path], DirectoryResult] = ensure_parent_directories) -> None:
        self.__output = output
        self.__chunk_size = chunk_size
        self.__ensure_directories = ensure_directories

    def stream(self, source: BinaryIO, destination: Optional[Path]) -> int:
        """
        Read a raw HTTP response from `source` until end of stream.

        @param source
          The response stream. It is not closed here; that is up to its owner.
        @param destination
          Where to write the body of a 200 response, or `None` to only echo.
        @return
          The number of bytes read, headers included.
        @throws LocalIOError
          If the destination cannot be opened or written.
        @throws StreamReadError
          If reading from `source` fails.
        @throws LiveOutputError
          If echoing to the live output fails.
        """
        state = StreamState()
        tee = Tee(source, self.__output, lambda: logger.info('End of response stream.'))

        with ExitStack() as stack:
            while True:
                chunk = self._read(tee, self._socket_read_error)
                if not chunk:
                    break

                if state.status is None:
                    state.status = classify(chunk)
                    logger.info('Response {} for caching.'.format(state.status.value))
                    if state.status is Status.ACCEPTED and destination is not None:
                        state.output_file = stack.enter_context(self._open_destination(destination))

                body_start = find_body_start(state, chunk)
                if body_start is not None and state.output_file is not None:
                    try:
                        state.output_file.write(chunk[body_start:])
                    except OSError as e:
                        raise LocalIOError(destination, 'error writing local file: {}'.format(e)) from e

                state.total_bytes += len(chunk)

        logger.info('Read {} bytes in total.'.format(state.total_bytes))
        return state.total_bytes

    def replay(self, path: Path) -> int:
        """
        Serve a cached file to the live output as if it had just been fetched.

        A minimal status line and Content-Length header precede the content.
        They only go to the output.

        @return
          The size of the file.
        @throws LiveOutputError
          If writing to the live output fails.
        """
        try:
            size = path.stat().st_size
            f = open(path, 'rb')
        except OSError as e:
            raise LocalIOError(path, 'cannot read cached file: {}'.format(e)) from e

        with f:
            try:
                self.__output.write(REPLAY_STATUS.format(size).encode('ascii'))
            except OSError as e:
                raise LiveOutputError('Error writing to the output: {}'.format(e)) from e
            tee = Tee(f, self.__output, lambda: logger.info('Replayed {} from the cache.'.format(path)))
            while self._read(tee, lambda e: LocalIOError(path, 'cannot read cached file: {}'.format(e))):
                pass
        return size

    def _read(self, tee: Tee, on_read_error: Callable[[OSError], FetchError]) -> bytes:
        try:
            return tee.read(self.__chunk_size)
        except WriterError as e:
            raise LiveOutputError('Error writing to the output: {}'.format(e)) from e.__cause__
        except OSError as e:
            raise on_read_error(e) from e

    @staticmethod
    def _socket_read_error(error: OSError) -> FetchError:
        return StreamReadError('Error reading from server socket: {}'.format(error))

    def _open_destination(self, destination: Path) -> BinaryIO:
        result = self.__ensure_directories(destination)
        if not result.ok:
            logger.warning('Could not create {}: {}'.format(result.failed_at, result.error))

        logger.info('Opening {} for writing.'.format(destination))
        try:
            return open(destination, 'wb')
        except OSError as e:
            raise LocalIOError(destination, 'error opening local file for writing: {}'.format(e)) from e
