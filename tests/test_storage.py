"""Tests for the local SQLite store."""

from listkeeper.storage import GroceryStore


class TestGroceryItems:
    def test_add_returns_record(self, store):
        record = store.add_item("2% Milk")

        assert record.id > 0
        assert record.name == "2% Milk"
        assert record.synced is False
        assert record.added_at

    def test_list_newest_first(self, store):
        store.add_item("Eggs")
        store.add_item("Milk")
        store.add_item("Bread")

        assert [r.name for r in store.list_items()] == ["Bread", "Milk", "Eggs"]

    def test_remove_is_case_insensitive_exact(self, store):
        store.add_item("2% Milk")
        store.add_item("Whole Milk")

        assert store.remove_item("2% MILK")
        assert not store.remove_item("milk")
        assert [r.name for r in store.list_items()] == ["Whole Milk"]

    def test_clear_returns_count(self, store):
        store.add_item("Eggs")
        store.add_item("Milk")

        assert store.clear_items() == 2
        assert store.list_items() == []
        assert store.clear_items() == 0

    def test_remove_takes_one_duplicate(self, store):
        store.add_item("Eggs")
        store.add_item("eggs")

        assert store.remove_item("EGGS")
        assert [r.name for r in store.list_items()] == ["Eggs"]
        assert store.remove_item("eggs")
        assert not store.remove_item("eggs")

    def test_synced_flag(self, store):
        store.add_item("Eggs", synced=True)
        store.add_item("Milk")

        assert [r.synced for r in store.list_items()] == [False, True]


class TestMessageLog:
    def test_recent_interactions_newest_first(self, store):
        store.log_interaction("owner", "add milk", "Added milk!")
        store.log_interaction("owner", "list", None)

        entries = store.recent_interactions(limit=10)

        assert [e.body for e in entries] == ["list", "add milk"]
        assert entries[0].response is None

    def test_limit(self, store):
        for i in range(5):
            store.log_interaction("owner", f"msg {i}", "ok")

        assert len(store.recent_interactions(limit=2)) == 2


class TestKeyValue:
    def test_set_and_overwrite(self, store):
        assert store.get_value("last_login_at") is None

        store.set_value("last_login_at", "2026-01-01T00:00:00")
        store.set_value("last_login_at", "2026-02-01T00:00:00")

        assert store.get_value("last_login_at") == "2026-02-01T00:00:00"


def test_file_database_persists(tmp_path):
    db_path = tmp_path / "data" / "listkeeper.db"
    store = GroceryStore(db_path)
    store.add_item("Eggs")
    store.close()

    reopened = GroceryStore(db_path)
    try:
        assert [r.name for r in reopened.list_items()] == ["Eggs"]
    finally:
        reopened.close()
