import logging
from pathlib import Path
from typing import Optional

from .model import DirectoryResult, RequestTarget


logger = logging.getLogger(__name__)

DEFAULT_DOCUMENT = 'index.html'


def map_to_local_path(hostname: str, path: str) -> str:
    """
    Map a host and request path onto the relative path of its local copy.

    The two are concatenated verbatim. A path naming a directory gets the
    default document name appended. Nothing is normalized: "..", query strings
    and percent-escapes are kept as they are.
    """
    local_path = hostname + path
    if local_path == hostname:
        return local_path + '/' + DEFAULT_DOCUMENT
    if local_path.endswith('/'):
        return local_path + DEFAULT_DOCUMENT
    return local_path


def ensure_parent_directories(full_path: Path) -> DirectoryResult:
    """
    Create every missing directory above `full_path`, outermost first.

    Directories that already exist are fine, so calling this twice is
    harmless. A failure is reported in the result rather than raised; it is up
    to the caller to decide whether the file can still be opened.
    """
    for directory in reversed(Path(full_path).parents):
        if directory.is_dir():
            continue
        try:
            logger.debug('Creating directory {}'.format(directory))
            directory.mkdir()
        except FileExistsError as e:
            # Lost a race with someone else creating it, or it is a plain file.
            if not directory.is_dir():
                logger.warning('Cannot create directory {}: a file is in the way'.format(directory))
                return DirectoryResult(failed_at=directory, error=e)
        except OSError as e:
            logger.warning('Cannot create directory {}: {}'.format(directory, e))
            return DirectoryResult(failed_at=directory, error=e)
    return DirectoryResult()


class MirrorCache:
    """
    A cache that is nothing more than a mirror of the remote paths on disk.

    There is no index and no invalidation: a resource is cached exactly when a
    regular file exists at its mapped path under `directory`.
    """

    def __init__(self, directory: Path) -> None:
        """
        @param directory
          The root under which `<hostname>/<path>` files live. Usually the
          current working directory.
        """
        self.__directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self.__directory

    def path_for(self, target: RequestTarget) -> Path:
        return self.__directory / map_to_local_path(target.hostname, target.path)

    def lookup(self, cache_path: Path) -> Optional[Path]:
        """
        Decide whether `cache_path` is a cache hit.

        @return
          `cache_path` if it is an existing regular file, otherwise `None`.
          Directories count as a miss; the fetch that follows will then fail to
          open the same path for writing.
        """
        if cache_path.is_file():
            logger.info('Cache hit: {}'.format(cache_path))
            return cache_path
        if cache_path.exists():
            logger.warning('{} exists but is not a regular file. Treating as a cache miss.'.format(cache_path))
        else:
            logger.info('Cache miss: {}'.format(cache_path))
        return None

    def get(self, target: RequestTarget) -> Optional[Path]:
        return self.lookup(self.path_for(target))
