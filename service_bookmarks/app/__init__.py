"""
Bookmarks Service package for the Bookmarks Access Layer.

This package serves paginated, per-owner bookmark lists from a read-through
cache and keeps that cache in step with bookmark writes. It provides:

- app.main: Wiring of configuration, cache backend and services.
- app.pagination: Page request sanitization and page metadata.
- app.cache: Grouped cache contract with Redis and in-memory backends.
- app.bookmarks: Bookmark models, repository, service and cached decorator.

Guidelines:
- The repository is the source of truth; the cache is an optimization.
- Cache failures are logged, never surfaced to callers.
- Cache writes never block or fail a read.
"""
