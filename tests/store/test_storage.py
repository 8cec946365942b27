"""Tests for persistence adapters and store rehydration."""

from __future__ import annotations

import json
from pathlib import Path

from linkshelf.store import JsonFileStorage, LinkInput, LinkStore, MemoryStorage


def test_json_storage_missing_file_loads_empty(tmp_path: Path) -> None:
    storage = JsonFileStorage(tmp_path / "links.json")
    assert storage.load() == []


def test_json_storage_save_overwrites_atomically(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "links.json"
    storage = JsonFileStorage(path)

    assert storage.save([{"id": "1"}, {"id": "2"}]) is True
    assert storage.save([{"id": "3"}]) is True

    assert json.loads(path.read_text(encoding="utf-8")) == [{"id": "3"}]
    assert [p.name for p in path.parent.iterdir()] == ["links.json"]


def test_json_storage_in_directory_uses_key(tmp_path: Path) -> None:
    storage = JsonFileStorage.in_directory(tmp_path)
    assert storage.path == tmp_path / "app_links.json"


def test_store_round_trip_through_file(tmp_path: Path) -> None:
    path = tmp_path / "links.json"
    store = LinkStore(JsonFileStorage(path))
    store.init()
    a = store.add(LinkInput(title="A", url="https://a.com", version="1.2.3"))
    b = store.add(LinkInput(title="B", url="https://b.com"))
    c = store.add(LinkInput(title="C", url="https://c.com"))
    store.reorder(c.id, a.id)

    reloaded = LinkStore(JsonFileStorage(path))
    reloaded.init()

    assert [(link.id, link.url, link.version) for link in reloaded.list()] == [
        (c.id, "https://c.com", "1.0.0"),
        (a.id, "https://a.com", "1.2.3"),
        (b.id, "https://b.com", "1.0.0"),
    ]


def test_saved_records_use_browser_field_names(tmp_path: Path) -> None:
    path = tmp_path / "links.json"
    store = LinkStore(JsonFileStorage(path))
    store.init()
    store.add(LinkInput(title="A", url="https://a.com"))

    record = json.loads(path.read_text(encoding="utf-8"))[0]
    assert set(record) == {"id", "title", "url", "description", "order", "version", "createdAt", "updatedAt"}


def test_init_backfills_order_and_version() -> None:
    legacy = [
        {"id": "x", "title": "X", "url": "https://x.com", "description": "",
         "createdAt": "2024-01-01T00:00:00Z", "updatedAt": "2024-01-01T00:00:00Z"},
        {"id": "y", "title": "Y", "url": "https://y.com", "description": "",
         "createdAt": "2024-01-01T00:00:00Z", "updatedAt": "2024-01-01T00:00:00Z"},
    ]
    storage = MemoryStorage(legacy)
    store = LinkStore(storage)

    links = store.init()

    assert [(link.id, link.order, link.version) for link in links] == [("x", 0, "1.0.0"), ("y", 1, "1.0.0")]
    assert storage.save_count == 1
    assert storage.load()[1]["order"] == 1


def test_init_sorts_by_order_without_saving_complete_data() -> None:
    records = [
        {"id": "b", "title": "B", "url": "https://b.com", "order": 5, "version": "1.0.0",
         "createdAt": "t", "updatedAt": "t"},
        {"id": "a", "title": "A", "url": "https://a.com", "order": 2, "version": "1.0.0",
         "createdAt": "t", "updatedAt": "t"},
    ]
    storage = MemoryStorage(records)
    store = LinkStore(storage)

    links = store.init()

    assert [link.id for link in links] == ["a", "b"]
    assert storage.save_count == 0


def test_init_with_corrupt_file_starts_empty(tmp_path: Path) -> None:
    path = tmp_path / "links.json"
    path.write_text("{not json", encoding="utf-8")
    store = LinkStore(JsonFileStorage(path))

    assert store.init() == []
    assert len(store) == 0


def test_init_with_non_list_payload_starts_empty(tmp_path: Path) -> None:
    path = tmp_path / "links.json"
    path.write_text('{"links": []}', encoding="utf-8")
    store = LinkStore(JsonFileStorage(path))

    assert store.init() == []


def test_init_sets_aside_unusable_records_but_keeps_them_on_disk() -> None:
    storage = MemoryStorage(
        [
            "garbage",
            {"title": "no id", "url": "https://n.com"},
            {"id": "ok", "title": "OK", "url": "https://ok.com"},
        ]
    )
    store = LinkStore(storage)

    links = store.init()
    store.add(LinkInput(title="New", url="https://new.com"))

    assert [link.id for link in links] == ["ok"]
    assert links[0].order == 2
    persisted = storage.load()
    assert "garbage" in persisted
    assert {"title": "no id", "url": "https://n.com"} in persisted
    assert [record["url"] for record in persisted if isinstance(record, dict) and "id" in record] == [
        "https://ok.com",
        "https://new.com",
    ]


def test_init_repairs_null_and_numeric_text_fields() -> None:
    storage = MemoryStorage(
        [
            {"id": "legacy", "title": "Legacy", "url": "https://legacy.com", "description": None,
             "order": 0, "version": 2, "createdAt": "t", "updatedAt": "t"},
            {"id": "ok", "title": "OK", "url": "https://ok.com", "description": "",
             "order": 1, "version": "1.0.0", "createdAt": "t", "updatedAt": "t"},
        ]
    )
    store = LinkStore(storage)

    links = store.init()
    store.add(LinkInput(title="New", url="https://new.com"))

    assert [(link.id, link.description, link.version) for link in links] == [
        ("legacy", "", "2"),
        ("ok", "", "1.0.0"),
    ]
    persisted = storage.load()
    assert [record["id"] for record in persisted][:2] == ["legacy", "ok"]
    assert persisted[0]["description"] == ""
    assert len(persisted) == 3


class _FailingStorage(MemoryStorage):
    def save(self, records) -> bool:
        self.save_count += 1
        return False


def test_save_failure_keeps_in_memory_state() -> None:
    storage = _FailingStorage()
    store = LinkStore(storage)
    store.init()

    link = store.add(LinkInput(title="A", url="https://a.com"))

    assert storage.save_count == 1
    assert store.get(link.id) is not None
    assert storage.load() == []
