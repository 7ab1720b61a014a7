import logging
from typing import BinaryIO, Union

from . import transport
from .cache import MirrorCache
from .errors import LiveOutputError
from .model import FetchResult, RequestTarget, Settings
from .streamer import ResponseStreamer


logger = logging.getLogger(__name__)


class CachingAgent:
    def __init__(self, cache: MirrorCache, streamer: ResponseStreamer, output: BinaryIO) -> None:
        self.cache = cache
        self.streamer = streamer
        self.output = output

    def retrieve(self, target: RequestTarget) -> FetchResult:
        """
        Show the resource named by `target`, fetching it only if it is not
        already cached.

        On a cache hit no network activity happens at all, not even name
        resolution. On a miss, the body of a 200 response is written to the
        cache as it streams in.
        """
        local_path = self.cache.path_for(target)
        hit = self.cache.lookup(local_path)

        if hit is not None:
            self._say('File is given from local filesystem\n')
            total_bytes = self.streamer.replay(hit)
        else:
            request = transport.encode_request(transport.build_request(target.hostname, target.path))
            self._say(b'HTTP request =\n' + request + '\nLEN = {}\n'.format(len(request)).encode('ascii'))

            logger.info('Fetching {}:{}{}'.format(target.hostname, target.port, target.path))
            with transport.connect(target.hostname, target.port) as connection:
                connection.send(request)
                total_bytes = self.streamer.stream(connection.reader, local_path)

        self._say('\n Total response bytes: {}\n'.format(total_bytes))
        return FetchResult(target=target,
                           local_path=local_path,
                           total_bytes=total_bytes,
                           from_cache=hit is not None)

    def _say(self, text: Union[str, bytes]) -> None:
        # Shares the sink with the echoed response so the two stay in order.
        if isinstance(text, str):
            text = text.encode('utf-8')
        try:
            self.output.write(text)
            self.output.flush()
        except OSError as e:
            raise LiveOutputError('Error writing to the output: {}'.format(e)) from e


def create(settings: Settings, output: BinaryIO) -> CachingAgent:
    return CachingAgent(MirrorCache(settings.cache_root),
                        ResponseStreamer(output, settings.chunk_size),
                        output)
