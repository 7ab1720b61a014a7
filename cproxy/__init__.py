"""
A caching HTTP/1.0 retrieval agent.

Resources are mirrored under `<hostname>/<path>` in the cache directory and
served from there on later requests.
"""

from .agent import CachingAgent, create
from .model import FetchResult, RequestTarget, Settings
