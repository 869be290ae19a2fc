"""Cursor Pagination Service.

This service provides a read API that pages through the users table with
opaque cursors:
- Stable rank-based windows under a total order
- Forward and backward navigation
- Stale or malformed cursors restart from the first page
"""

__version__ = "0.1.0"
