"""devcache: find and reclaim disposable build caches in project trees."""

__version__ = "0.1.0"
