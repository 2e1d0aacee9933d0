"""
NodeBB Thread Exporter – dump a forum topic as Markdown posts.

Supports:
  • Resolving the topic from a page URL or its embedded page state
  • Fetching every page of a topic concurrently through the JSON API
  • Converting post HTML to Markdown (absolute images, clean quotes, plain mentions)
  • Dropping deleted posts and keeping reply linkage
"""

from .errors import ExporterError, NetworkError, ResolutionError
from .fetcher import ThreadFetcher
from .models import NormalizedPost, ThreadExport

__all__ = [
    "ExporterError",
    "NetworkError",
    "NormalizedPost",
    "ResolutionError",
    "ThreadExport",
    "ThreadFetcher",
]
