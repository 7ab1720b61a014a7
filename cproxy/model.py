"""
Defines the types passed between the parts of the retrieval agent.

These types are as simple as possible. Anything with behaviour beyond
construction lives in the modules that consume them.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import BinaryIO, Optional

from .errors import UsageError


SCHEME = 'http://'
DEFAULT_PORT = 80
CHUNK_SIZE = 1024


@dataclass(frozen=True)
class RequestTarget:
    """
    The resource named by the URL given on the command line.
    """

    hostname: str
    """
    The host to connect to, without any port suffix. E.g., "example.test".
    """

    path: str = '/'
    """
    The request path, always starting with "/". The query string, if any, is
    kept verbatim.
    """

    port: int = DEFAULT_PORT
    """
    The TCP port to connect to.
    """

    @classmethod
    def from_url(cls, url: str) -> 'RequestTarget':
        if not url.startswith(SCHEME):
            raise UsageError('URL must start with {}: {}'.format(SCHEME, url))

        authority, slash, rest = url[len(SCHEME):].partition('/')
        path = slash + rest if slash else '/'

        hostname, colon, port_text = authority.partition(':')
        if not hostname:
            raise UsageError('URL has no hostname: {}'.format(url))

        port = DEFAULT_PORT
        if colon:
            try:
                port = int(port_text)
            except ValueError:
                raise UsageError('Invalid port in URL: {}'.format(url))
            if not 0 < port < 65536:
                raise UsageError('Port out of range in URL: {}'.format(url))

        return cls(hostname=hostname, path=path, port=port)


class Status(Enum):
    """
    The caching verdict for a response, decided from its first chunk.
    """
    ACCEPTED = 'accepted'
    REJECTED = 'rejected'


@dataclass
class StreamState:
    """
    Everything `ResponseStreamer.stream()` needs to remember between reads.
    """

    total_bytes: int = 0
    boundary_found: bool = False

    status: Optional[Status] = None
    """
    `None` until the first chunk has been classified.
    """

    output_file: Optional[BinaryIO] = field(default=None, compare=False)
    """
    The cache file receiving the body, if one was opened.
    """

    tail: bytes = b''
    """
    The last few bytes of the previous chunk, so that a header terminator split
    across two reads is still found.
    """


@dataclass(frozen=True)
class DirectoryResult:
    """
    The outcome of creating the parent directories of a cache file.

    On failure, `failed_at` is the first directory that could not be created
    and `error` is the reason.
    """
    failed_at: Optional[Path] = None
    error: Optional[OSError] = field(default=None, compare=False)

    @property
    def ok(self) -> bool:
        return self.failed_at is None


@dataclass(frozen=True)
class FetchResult:
    target: RequestTarget
    local_path: Path
    total_bytes: int
    from_cache: bool


@dataclass
class Settings:
    """
    Run-time options, as assembled by the command line interface.
    """

    cache_root: Path = field(default_factory=Path)
    """
    The directory under which `<hostname>/<path>` files are mirrored.
    """

    chunk_size: int = CHUNK_SIZE

    show: bool = False
    """
    Whether to open the local copy in a viewer once it is available.
    """

    viewer: Optional[str] = None
    """
    The name of a `webbrowser` controller to use instead of the default one.
    """
