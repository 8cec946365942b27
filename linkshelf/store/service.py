"""Link store: the ordered link collection and its import reconciliation."""

from __future__ import annotations

import copy
from typing import Any, Iterable

from loguru import logger
from pydantic import ValidationError as ModelValidationError

from linkshelf.errors import PersistenceFailure, ValidationError

from .models import Candidate, Link, LinkInput, ReconcileResult, new_link_id, utc_now
from .render import NullRenderer, Renderer
from .storage import LinkStorage, Record
from .versioning import DEFAULT_VERSION, increment_version


def _clean(value: str | None) -> str:
    return (value or "").strip()


def _validate_input(data: LinkInput) -> tuple[str, str, str]:
    title = _clean(data.title)
    url = _clean(data.url)
    if not title:
        raise ValidationError("title", "Title is required")
    if not url:
        raise ValidationError("url", "URL is required")
    return title, url, _clean(data.description)


class LinkStore:
    """In-memory, user-ordered link collection backed by a :class:`LinkStorage`.

    The store is the only writer of the persisted collection. Every mutation
    runs to completion, rewrites the whole collection once and then asks the
    renderer to redraw. Links are kept sorted by ``order``; callers only ever
    receive copies.
    """

    def __init__(self, storage: LinkStorage, renderer: Renderer | None = None) -> None:
        self._storage = storage
        self._renderer: Renderer = renderer or NullRenderer()
        self._links: list[Link] = []
        # Stored records that could not be loaded; written back verbatim on every save.
        self._unreadable: list[Any] = []

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def init(self) -> list[Link]:
        """Rehydrate from storage, backfilling ``order``/``version`` on old data."""
        try:
            records = self._storage.load()
        except PersistenceFailure as exc:
            logger.error("Could not load links; starting with an empty collection: {}", exc)
            records = []
        except Exception as exc:  # pragma: no cover - third-party adapters
            logger.exception("Unexpected error while loading links: {}", exc)
            records = []

        links, backfilled = self._hydrate(records)
        links.sort(key=lambda link: link.order)
        self._links = links
        logger.info("Loaded {} links", len(links))

        if self._unreadable:
            logger.warning("{} stored records could not be loaded and are preserved as-is", len(self._unreadable))
        if backfilled:
            logger.info("Backfilled missing fields on {} links; saving", backfilled)
            self._persist()
        self._render()
        return self.list()

    def _hydrate(self, records: Iterable[Any]) -> tuple[list[Link], int]:
        links: list[Link] = []
        self._unreadable = []
        backfilled = 0
        for index, record in enumerate(records):
            if not isinstance(record, dict):
                logger.warning("Keeping non-object link record at position {} untouched", index)
                self._unreadable.append(record)
                continue

            patched = _repair(record, index)
            try:
                link = Link.model_validate(patched)
            except ModelValidationError as exc:
                logger.warning("Keeping invalid link record at position {} untouched: {}", index, exc)
                self._unreadable.append(record)
                continue

            if patched != record:
                backfilled += 1
            links.append(link)
        return links, backfilled

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def list(self) -> list[Link]:
        """Snapshot of every link, ascending by ``order``."""
        return [link.model_copy(deep=True) for link in self._links]

    def get(self, link_id: str) -> Link | None:
        index = self._index_of(link_id)
        if index is None:
            return None
        return self._links[index].model_copy(deep=True)

    def __len__(self) -> int:
        return len(self._links)

    def __contains__(self, link_id: object) -> bool:
        return isinstance(link_id, str) and self._index_of(link_id) is not None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def add(self, data: LinkInput) -> Link:
        """Append a new link after every existing one.

        Raises :class:`~linkshelf.errors.ValidationError` when the title or
        URL is blank; nothing is written in that case.
        """
        title, url, description = _validate_input(data)
        now = utc_now()
        link = Link(
            id=new_link_id(),
            title=title,
            url=url,
            description=description,
            order=self._next_order(),
            version=_clean(data.version) or DEFAULT_VERSION,
            created_at=now,
            updated_at=now,
        )
        self._links.append(link)
        logger.debug("Added link {} ({}) at order {}", link.id, link.url, link.order)
        self._commit()
        return link.model_copy(deep=True)

    def update(self, link_id: str, data: LinkInput) -> Link | None:
        """Replace the user-editable fields of a link.

        Returns ``None`` when ``link_id`` is unknown; the store is left
        untouched. ``order``, ``id`` and ``created_at`` never change here.
        """
        index = self._index_of(link_id)
        if index is None:
            logger.debug("Update ignored; link {} not found", link_id)
            return None

        title, url, description = _validate_input(data)
        current = self._links[index]
        updated = current.model_copy(
            update={
                "title": title,
                "url": url,
                "description": description,
                "version": _clean(data.version) or current.version or DEFAULT_VERSION,
                "updated_at": utc_now(),
            }
        )
        self._links[index] = updated
        logger.debug("Updated link {}", link_id)
        self._commit()
        return updated.model_copy(deep=True)

    def delete(self, link_id: str) -> bool:
        """Remove a link if present. Remaining ``order`` values are kept as-is."""
        remaining = [link for link in self._links if link.id != link_id]
        removed = len(remaining) != len(self._links)
        self._links = remaining
        if removed:
            logger.debug("Deleted link {}", link_id)
        else:
            logger.debug("Delete of unknown link {} is a no-op", link_id)
        self._commit()
        return removed

    def reorder(self, dragged_id: str, target_id: str) -> bool:
        """Move ``dragged_id`` into the slot ``target_id`` occupies.

        Dragging upwards lands in front of the target and dragging downwards
        lands behind it, so both ends of the list are reachable. Every link
        is renumbered to its new 0-based position. Returns ``False`` (and
        changes nothing) when either id is unknown or both are the same.
        """
        if dragged_id == target_id:
            return False
        dragged_index = self._index_of(dragged_id)
        target_index = self._index_of(target_id)
        if dragged_index is None or target_index is None:
            return False

        reordered = list(self._links)
        dragged = reordered.pop(dragged_index)
        reordered.insert(target_index, dragged)

        renumbered = [
            link if link.order == position else link.model_copy(update={"order": position})
            for position, link in enumerate(reordered)
        ]
        self._links = renumbered
        logger.debug("Moved link {} to position {}", dragged_id, target_index)
        self._commit()
        return True

    def batch_reconcile(self, candidates: Iterable[Candidate]) -> ReconcileResult:
        """Merge imported candidates into the collection in one pass.

        A candidate whose URL matches an existing link updates that link in
        place (title, description, version) and keeps its position; the
        version is bumped by one patch level unless the candidate carries its
        own. Unmatched candidates are appended in input order after every
        existing link. The collection is saved and rendered at most once.

        ``skipped`` counts candidates whose URL is blank after trimming; they
        are never stored. The bundled importers drop such records themselves,
        so for them the count stays zero.
        """
        next_order = self._next_order()
        added = updated = skipped = 0
        now = utc_now()

        for candidate in candidates:
            url = _clean(candidate.url)
            if not url:
                skipped += 1
                continue

            title = _clean(candidate.title)
            description = _clean(candidate.description)
            version = _clean(candidate.version)
            index = self._index_of_url(url)

            if index is not None:
                existing = self._links[index]
                self._links[index] = existing.model_copy(
                    update={
                        "title": title,
                        "description": description or existing.description,
                        "version": version or increment_version(existing.version),
                        "updated_at": now,
                    }
                )
                updated += 1
                continue

            self._links.append(
                Link(
                    id=new_link_id(),
                    title=title,
                    url=url,
                    description=description,
                    order=next_order,
                    version=version or DEFAULT_VERSION,
                    created_at=now,
                    updated_at=now,
                )
            )
            next_order += 1
            added += 1

        result = ReconcileResult(added=added, updated=updated, skipped=skipped)
        if result.changed:
            self._commit()
        logger.info(
            "Reconciled batch: {} added, {} updated, {} skipped",
            result.added,
            result.updated,
            result.skipped,
        )
        return result

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _index_of(self, link_id: str) -> int | None:
        for index, link in enumerate(self._links):
            if link.id == link_id:
                return index
        return None

    def _index_of_url(self, url: str) -> int | None:
        for index, link in enumerate(self._links):
            if link.url == url:
                return index
        return None

    def _next_order(self) -> int:
        if not self._links:
            return 0
        return max(link.order for link in self._links) + 1

    def _commit(self) -> None:
        self._persist()
        self._render()

    def _persist(self) -> None:
        records: list[Record] = [link.to_record() for link in self._links]
        records.extend(copy.deepcopy(self._unreadable))
        try:
            saved = self._storage.save(records)
        except PersistenceFailure as exc:
            logger.error("Saving links failed; keeping in-memory state: {}", exc)
            return
        if not saved:
            logger.warning("Storage reported a failed save; in-memory state remains authoritative")

    def _render(self) -> None:
        self._renderer.render(self.list())


_TEXT_FIELDS = ("title", "url", "description", "version")


def _repair(record: Record, index: int) -> Record:
    """Fill in fields older collections lack and coerce loosely typed text.

    ``order`` falls back to the load position and ``version`` to the
    default. ``null`` text becomes ``""``; numbers and booleans in text
    fields become their string form.
    """
    patched = dict(record)
    for name in _TEXT_FIELDS:
        value = patched.get(name)
        if value is None:
            if name in patched:
                patched[name] = ""
        elif isinstance(value, (int, float, bool)):
            patched[name] = str(value)
    if isinstance(patched.get("id"), int):
        patched["id"] = str(patched["id"])
    if patched.get("order") is None:
        patched["order"] = index
    if not patched.get("version"):
        patched["version"] = DEFAULT_VERSION
    for stamp in ("createdAt", "updatedAt"):
        if not patched.get(stamp) and not patched.get(_snake(stamp)):
            patched[stamp] = utc_now()
    return patched


def _snake(name: str) -> str:
    return "".join(f"_{char.lower()}" if char.isupper() else char for char in name)


__all__ = ["LinkStore"]
