import logging
import webbrowser
from pathlib import Path
from typing import Optional


logger = logging.getLogger(__name__)


def launch(path: Path, viewer: Optional[str] = None) -> None:
    """
    Ask the desktop to open `path` in a viewer, and forget about it.

    @param path
      An absolute path to the local copy.
    @param viewer
      The name of a registered `webbrowser` controller (e.g., "firefox"), or
      `None` for the default one.
    """
    uri = Path(path).as_uri()
    logger.info('Opening {} in {}'.format(uri, viewer or 'the default viewer'))
    try:
        controller = webbrowser.get(viewer) if viewer else webbrowser
        opened = controller.open(uri)
    except webbrowser.Error as e:
        logger.warning('Could not find viewer {}: {}'.format(viewer, e))
        return
    if not opened:
        logger.warning('No viewer accepted {}'.format(uri))
