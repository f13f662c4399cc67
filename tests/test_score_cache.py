import json

from grater.score_cache import InMemoryScoreStore, JsonScoreStore


def test_json_store_round_trips_through_disk(tmp_path):
    path = tmp_path / "ws" / "cache.json"
    store = JsonScoreStore(path)
    assert store.get("github.com/a/b") is None

    store.set("github.com/a/b", 8.5)
    store.flush()

    reloaded = JsonScoreStore(path)
    assert reloaded.get("github.com/a/b") == 8.5
    assert json.loads(path.read_text()) == {"github.com/a/b": 8.5}


def test_json_store_ignores_corrupt_file(tmp_path):
    path = tmp_path / "cache.json"
    path.write_text("{not json")
    store = JsonScoreStore(path)
    assert store.scores == {}


def test_json_store_drops_non_numeric_entries(tmp_path):
    path = tmp_path / "cache.json"
    path.write_text(json.dumps({"github.com/a/b": 4, "github.com/c/d": "x", "github.com/e/f": True}))
    store = JsonScoreStore(path)
    assert store.scores == {"github.com/a/b": 4.0}


def test_in_memory_store_copies_initial_mapping():
    initial = {"github.com/a/b": 1.0}
    store = InMemoryScoreStore(initial)
    store.set("github.com/c/d", 2.0)
    store.flush()
    assert initial == {"github.com/a/b": 1.0}
    assert store.get("github.com/c/d") == 2.0
