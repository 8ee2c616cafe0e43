"""Business logic layer for matters app.

This package contains all business logic for the matter tree:
- Upload, crawl, directory creation
- Move, copy, rename, delete with descendant path re-stamping
- Per-user operation locks, path resolution, ancestry details
- Upload size limits and image cache invalidation

Functions prefixed with ``atomic_`` hold the owner's lock and must not
call each other. Everything else expects the caller to hold it.
"""
