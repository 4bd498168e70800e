"""
Session shim.

Routers import `get_session` from here.
Re-exports `get_db` from the canonical database.py.
"""

from caselab.db.database import get_db as get_session  # noqa: F401

__all__ = ["get_session"]
