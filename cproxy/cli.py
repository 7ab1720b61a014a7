import argparse
import logging
import sys
from pathlib import Path
from typing import BinaryIO, List, Optional

from . import agent, launcher
from .errors import FetchError, UsageError
from .model import RequestTarget, Settings


logger = logging.getLogger(__name__)

USAGE_EXIT_CODE = 1
FAILURE_EXIT_CODE = 1


class ArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(USAGE_EXIT_CODE, '{}: error: {}\n'.format(self.prog, message))


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(prog='cproxy',
                            description='Fetch a URL over HTTP/1.0, keeping a local copy for next time.')
    parser.add_argument('url', help='the resource to fetch, starting with http://')
    parser.add_argument('-s', '--show', action='store_true',
                        help='open the local copy in a viewer afterwards')
    parser.add_argument('--viewer', default=None,
                        help='name of the browser to use with --show (e.g., firefox)')
    parser.add_argument('--cache-dir', type=Path, default=Path(),
                        help='directory holding the local copies (default: current directory)')
    parser.add_argument('-v', '--verbose', action='count', default=0,
                        help='log progress to stderr; repeat for more detail')
    return parser


def configure_logging(verbosity: int) -> None:
    level = {0: logging.WARNING, 1: logging.INFO}.get(verbosity, logging.DEBUG)
    logging.basicConfig(level=level,
                        stream=sys.stderr,
                        format='%(asctime)s %(levelname)s %(name)s: %(message)s')


def main(argv: Optional[List[str]] = None, output: Optional[BinaryIO] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        target = RequestTarget.from_url(args.url)
    except UsageError as e:
        parser.error(str(e))

    settings = Settings(cache_root=args.cache_dir, show=args.show, viewer=args.viewer)
    if output is None:
        output = sys.stdout.buffer

    try:
        result = agent.create(settings, output).retrieve(target)
    except FetchError as e:
        logger.error('Retrieval of {} failed.'.format(args.url))
        print('cproxy: {}'.format(e), file=sys.stderr)
        return FAILURE_EXIT_CODE

    if settings.show and result.local_path.is_file():
        launcher.launch(result.local_path.resolve(), settings.viewer)

    return 0
