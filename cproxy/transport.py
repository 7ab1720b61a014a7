import logging
import os
import socket
from typing import BinaryIO, Optional

from .errors import ConnectError, ResolutionError


logger = logging.getLogger(__name__)


def build_request(hostname: str, path: str) -> str:
    """
    Format the one request this agent ever sends.

    Both values are used verbatim.
    """
    return 'GET {} HTTP/1.0\r\nHost: {}\r\n\r\n'.format(path, hostname)


def encode_request(request: str) -> bytes:
    """
    Turn a request into the bytes sent on the wire.

    The URL is sent as the bytes it was given on the command line, so
    non-ASCII paths go out in the filesystem encoding (UTF-8 on most systems).
    """
    return os.fsencode(request)


class Connection:
    """
    An open TCP connection to an HTTP server.

    Use as a context manager so the socket is released on every exit path.
    """

    def __init__(self, sock: socket.socket, hostname: str, port: int) -> None:
        self.__socket = sock
        self.__hostname = hostname
        self.__port = port
        self.__reader: Optional[BinaryIO] = None

    @property
    def reader(self) -> BinaryIO:
        """
        An unbuffered stream over the socket. `read(n)` returns at most `n`
        bytes, and `b''` once the server has closed its side.
        """
        if self.__reader is None:
            self.__reader = self.__socket.makefile('rb', buffering=0)
        return self.__reader

    def send(self, data: bytes) -> None:
        try:
            self.__socket.sendall(data)
        except OSError as e:
            raise ConnectError(self.__hostname, self.__port, 'error sending request: {}'.format(e)) from e

    def close(self) -> None:
        if self.__reader is not None:
            self.__reader.close()
        self.__socket.close()

    def __enter__(self) -> 'Connection':
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def resolve(hostname: str, port: int):
    try:
        records = socket.getaddrinfo(hostname, port, type=socket.SOCK_STREAM)
    except (socket.gaierror, UnicodeError) as e:
        raise ResolutionError(hostname) from e
    if not records:
        raise ResolutionError(hostname)
    return records[0]


def connect(hostname: str, port: int) -> Connection:
    """
    Resolve `hostname` and open a TCP connection to it.

    There is exactly one attempt, against the first address found, with the
    operating system's default timeout.

    @throws ResolutionError
      If the name has no address.
    @throws ConnectError
      If the connection could not be established.
    """
    family, socktype, proto, _, address = resolve(hostname, port)
    logger.info('Resolved {} to {}'.format(hostname, address[0]))

    try:
        sock = socket.socket(family, socktype, proto)
    except OSError as e:
        raise ConnectError(hostname, port, str(e)) from e

    try:
        sock.connect(address)
    except OSError as e:
        sock.close()
        raise ConnectError(hostname, port, str(e)) from e

    logger.info('Connected to {}:{}'.format(hostname, port))
    return Connection(sock, hostname, port)
