"""Core package for the local-first link manager.

The public surface is intentionally small: the :class:`LinkStore` owns the
link collection, and the import sources feed it through reconciliation.
"""

from linkshelf.store import Candidate, Link, LinkStore, ReconcileResult

__all__: list[str] = ["Candidate", "Link", "LinkStore", "ReconcileResult"]
