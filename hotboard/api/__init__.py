"""
Read-only snapshot API.

Provides:
- GET /health - Service health check
- GET /sources - Configured sources with snapshot status
- GET /snapshots/{source_id} - Stored snapshot, normalized to an items list
"""

from hotboard.api.app import create_app

__all__ = ["create_app"]
