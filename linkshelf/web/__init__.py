"""Local JSON API for the link store."""

from linkshelf.web.app import create_app

__all__ = ["create_app"]
