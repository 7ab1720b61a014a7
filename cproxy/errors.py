from pathlib import Path


class FetchError(Exception):
    """
    Base class for every failure that ends a retrieval.

    None of these are recoverable: the command line interface reports the
    message and exits with a non-zero status.
    """


class UsageError(FetchError):
    pass


class ResolutionError(FetchError):
    def __init__(self, hostname: str) -> None:
        super().__init__('Could not resolve host: {}'.format(hostname))
        self.__hostname = hostname

    @property
    def hostname(self) -> str:
        return self.__hostname


class ConnectError(FetchError):
    def __init__(self, hostname: str, port: int, reason: str = 'connection failed') -> None:
        super().__init__('Could not talk to {}:{}: {}'.format(hostname, port, reason))
        self.__hostname = hostname
        self.__port = port

    @property
    def hostname(self) -> str:
        return self.__hostname

    @property
    def port(self) -> int:
        return self.__port


class LocalIOError(FetchError):
    def __init__(self, path: Path, reason: str) -> None:
        super().__init__('{}: {}'.format(path, reason))
        self.__path = path

    @property
    def path(self) -> Path:
        return self.__path


class StreamReadError(FetchError):
    pass


class LiveOutputError(FetchError):
    """
    Writing to the live output failed, e.g. because the reader of a pipe went
    away.
    """
