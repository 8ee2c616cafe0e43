"""Infrastructure layer for matters app.

This package contains integrations with external systems:
- Local filesystem storage backend for the physical tree
- Name and path validation, size formatting
- Remote fetch of crawled urls

Keep infrastructure concerns separate from business logic.
"""
