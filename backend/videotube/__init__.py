"""Video-sharing backend: accounts, authentication and session management.

``from videotube import create_app`` returns the configured Flask application.
"""

from __future__ import annotations

from .factory import create_app

__all__ = ["create_app"]
