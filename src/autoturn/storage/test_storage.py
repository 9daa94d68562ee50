#!/usr/bin/env python3
"""
Test script to verify the storage layer works correctly.
Run with: pytest src/autoturn/storage/test_storage.py
"""

import json
import tempfile
from pathlib import Path

import pytest


def make_manager():
    from autoturn.storage import ActionQueueManager, Database

    return ActionQueueManager(Database(":memory:"))


def test_sqlite_database():
    """Test SQLite schema initialization and basic operations."""
    print("\n=== Testing SQLite Database ===")

    from autoturn.storage import Database, to_json, from_json

    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "nested" / "test.db"
        db = Database(db_path)

        # Initialize schema
        db.init_schema()
        print(f"✓ Schema initialized (version {db.get_schema_version()})")

        assert db.table_exists("action_queues")
        assert db.table_exists("schema_version")
        assert db.get_table_count("action_queues") == 0
        print("✓ Tables created")

        # Test JSON helpers
        test_dict = {"STR": 10, "DEX": 14}
        assert from_json(to_json(test_dict)) == test_dict
        assert to_json(None) is None
        print("✓ JSON serialization helpers work")

        db.close()
        print("✓ SQLite tests passed!")


def test_queue_persists_across_connections():
    from autoturn.models import QueuedAction
    from autoturn.storage import ActionQueueManager, Database

    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "queues.db"
        with Database(db_path) as db:
            ActionQueueManager(db).set_queue("hero", [QueuedAction(id="a", name="Advance")])

        with Database(db_path) as db:
            queue = ActionQueueManager(db).get_queue("hero")

    assert [(a.id, a.name) for a in queue] == [("a", "Advance")]


def test_queue_crud():
    """Add, update, duplicate, remove and reorder keep a dense order."""
    print("\n=== Testing ActionQueueManager ===")

    from autoturn.models import ActionType, QueuedAction

    queues = make_manager()
    assert queues.get_queue("hero") == []
    assert not queues.is_queue_enabled("hero")

    first = queues.add_action("hero", QueuedAction(id="a", name="Advance", type=ActionType.MOVEMENT, order=7))
    queues.add_action("hero", QueuedAction(id="b", name="Swing", type=ActionType.ATTACK))
    queues.add_action("hero", QueuedAction(id="c", name="Shove", type=ActionType.BONUS_ACTION))
    assert first.order == 0
    assert [a.order for a in queues.get_queue("hero")] == [0, 1, 2]
    assert queues.is_queue_enabled("hero")
    print("✓ Actions appended in order")

    updated = queues.update_action("hero", "b", name="Heavy Swing", enabled=False)
    assert updated.name == "Heavy Swing"
    assert queues.load_ordered_enabled("hero")[1].id == "c"
    assert queues.update_action("hero", "missing", name="x") is None

    copy = queues.duplicate_action("hero", "a")
    assert copy.name == "Advance (Copy)"
    assert copy.id != "a"
    assert copy.order == 3
    assert queues.duplicate_action("hero", "missing") is None
    print("✓ Update and duplicate work")

    assert queues.remove_action("hero", "b")
    assert not queues.remove_action("hero", "b")
    assert [(a.id, a.order) for a in queues.get_queue("hero")] == [("a", 0), ("c", 1), (copy.id, 2)]

    queues.reorder_actions("hero", [copy.id, "a", "unknown"])
    assert [(a.id, a.order) for a in queues.get_sorted_actions("hero")] == [(copy.id, 0), ("a", 1)]

    queues.clear_queue("hero")
    assert queues.get_queue("hero") == []
    print("✓ Remove, reorder and clear work")


def test_set_queue_keeps_enabled_flag():
    from autoturn.models import QueuedAction

    queues = make_manager()
    queues.set_queue_enabled("hero", False)
    queues.set_queue("hero", [QueuedAction(id="a")])

    assert not queues.is_queue_enabled("hero")
    assert [a.id for a in queues.get_queue("hero")] == ["a"]

    queues.set_queue_enabled("hero", True)
    assert queues.is_queue_enabled("hero")


def test_sorted_actions_are_stable():
    from autoturn.models import QueuedAction

    queues = make_manager()
    queues.set_queue("hero", [
        QueuedAction(id="late", order=5),
        QueuedAction(id="tie_one", order=1),
        QueuedAction(id="off", order=0, enabled=False),
        QueuedAction(id="tie_two", order=1),
    ])

    assert [a.id for a in queues.get_sorted_actions("hero")] == ["off", "tie_one", "tie_two", "late"]
    assert [a.id for a in queues.load_ordered_enabled("hero")] == ["tie_one", "tie_two", "late"]


def test_export_format():
    from autoturn.models import Condition, ConditionType, QueuedAction

    queues = make_manager()
    queues.set_queue("hero", [
        QueuedAction(
            id="a",
            condition=Condition(type=ConditionType.RESOURCE_AVAILABLE, value="spell-slot-1"),
            payload={"itemUuid": "item_firebolt_001"},
            on_failure="b",
        ),
        QueuedAction(id="b", order=1),
    ])

    exported = json.loads(queues.export_queue("hero", "Hero"))

    assert exported["version"] == "1.0.0"
    assert exported["tokenName"] == "Hero"
    assert [a["id"] for a in exported["actions"]] == ["a", "b"]
    assert exported["actions"][0]["conditions"] == {"type": "resourceAvailable", "value": "spell-slot-1"}
    assert exported["actions"][0]["data"] == {"itemUuid": "item_firebolt_001"}
    assert exported["actions"][0]["onFailure"] == "b"
    print("✓ Export format")


def test_import_replace_assigns_fresh_ids():
    from autoturn.models import QueuedAction

    source = make_manager()
    source.set_queue("hero", [
        QueuedAction(id="a", name="Swing", order=3, on_failure="b", on_success="elsewhere"),
        QueuedAction(id="b", name="Retreat", order=9, enabled=False),
    ])
    exported = source.export_queue("hero", "Hero")

    target = make_manager()
    target.set_queue("rogue", [QueuedAction(id="old")])
    imported = target.import_queue("rogue", exported)

    queue = target.get_queue("rogue")
    assert [a.name for a in queue] == ["Swing", "Retreat"]
    assert [a.order for a in queue] == [0, 1]
    assert {a.id for a in queue}.isdisjoint({"a", "b", "old"})
    assert len({a.id for a in queue}) == 2
    # In-batch branch follows the new id; the outside reference is dropped
    assert queue[0].on_failure == queue[1].id
    assert queue[0].on_success is None
    assert not queue[1].enabled
    assert [a.id for a in imported] == [a.id for a in queue]
    print("✓ Import (replace) assigns fresh ids and dense order")


def test_import_append_continues_order():
    from autoturn.models import QueuedAction

    queues = make_manager()
    queues.set_queue("hero", [QueuedAction(id="x"), QueuedAction(id="y", order=1)])
    payload = json.dumps({"version": "1.0.0", "actions": [{"id": "x", "name": "Again"}]})

    queues.import_queue("hero", payload, append=True)

    queue = queues.get_queue("hero")
    assert [a.order for a in queue] == [0, 1, 2]
    assert queue[2].name == "Again"
    assert queue[2].id not in {"x", "y"}
    print("✓ Import (append) continues after existing actions")


def test_import_rejects_bad_data():
    from autoturn.core import QueueImportError, ResourceLoadError
    from autoturn.models import QueuedAction

    queues = make_manager()
    queues.set_queue("hero", [QueuedAction(id="keep")])

    for bad in ("not json", json.dumps([1, 2]), json.dumps({"actions": "none"}),
                json.dumps({"actions": [{"order": "first"}]})):
        with pytest.raises(QueueImportError):
            queues.import_queue("hero", bad)

    assert issubclass(QueueImportError, ResourceLoadError)
    assert [a.id for a in queues.get_queue("hero")] == ["keep"]


def test_corrupt_row_raises_resource_load_error():
    from autoturn.core import ResourceLoadError

    queues = make_manager()
    queues.db.execute(
        "INSERT INTO action_queues (subject_id, version, enabled, actions) VALUES (?, ?, ?, ?)",
        ("hero", "1.0.0", 1, "{broken"),
    )
    queues.db.commit()

    with pytest.raises(ResourceLoadError):
        queues.get_queue("hero")


def test_scene_graph():
    """Test NetworkX scene graph operations."""
    print("\n=== Testing SceneGraph ===")

    from autoturn.models import Disposition, Item, Position, Token
    from autoturn.storage import SceneGraph, NodeType

    scene = SceneGraph(grid_distance=5)
    hero = Token(id="hero", name="Hero", position=Position(0, 0), disposition=Disposition.FRIENDLY, hp=10, max_hp=10)
    wolf = Token(id="wolf", name="Wolf", position=Position(3, 4), disposition=Disposition.HOSTILE, hp=11, max_hp=11)
    cat = Token(id="cat", name="Cat", position=Position(1, 1), disposition=Disposition.NEUTRAL, hp=2, max_hp=2)
    for token in (hero, wolf, cat):
        scene.add_token(token)
    scene.add_item(Item(id="spear", name="Spear", reach=10), owner_id="hero")

    assert scene.get_nodes_by_type(NodeType.TOKEN) == ["hero", "wolf", "cat"]
    assert scene.get_item("spear").reach == 10
    assert scene.get_item("hero") is None
    assert scene.get_token("spear") is None
    assert scene.get_owner("spear") is hero
    assert [i.id for i in scene.items_of("hero")] == ["spear"]
    print(f"✓ {scene}")

    # Diagonals count as one square
    assert scene.distance_between(hero, wolf) == 20
    assert scene.path_distance([Position(0, 0), Position(2, 0), Position(2, 3)]) == 25
    print("✓ Grid distances")

    assert [t.id for t in scene.hostiles_of(hero)] == ["wolf"]
    assert [t.id for t in scene.hostiles_of(wolf)] == ["hero"]
    assert scene.hostiles_of(cat) == []
    wolf.hidden = True
    assert scene.hostiles_of(hero) == []
    assert [t.id for t in scene.hostiles_of(hero, reveal_hidden=True)] == ["wolf"]

    assert scene.move_token("hero", Position(2, 2))
    assert hero.position == Position(2, 2)
    assert not scene.move_token("ghost", Position(0, 0))

    assert scene.remove_node("spear")
    assert scene.get_stats() == {"tokens": 3, "items": 0, "ownership_edges": 0}
    print("✓ SceneGraph tests passed!")


def test_export_import_round_trip_keeps_content():
    from autoturn.models import ActionType, Condition, ConditionType, QueuedAction

    queues = make_manager()
    original = [
        QueuedAction(id="a", type=ActionType.MOVEMENT, payload={"targetType": "nearestEnemy", "maxDistance": 30}),
        QueuedAction(
            id="b",
            type=ActionType.SPELL,
            order=1,
            condition=Condition(type=ConditionType.RESOURCE_AVAILABLE, value="spell-slot-3"),
            payload={"itemUuid": "item_fireball_001", "targetPriority": ["highestHP"]},
        ),
    ]
    queues.set_queue("hero", original)

    queues.import_queue("rogue", queues.export_queue("hero", "Hero"))

    def content(action):
        record = action.to_record()
        return record["type"], record["conditions"], record["data"]

    assert [content(a) for a in queues.get_sorted_actions("rogue")] == [content(a) for a in original]
    print("✓ Export/import round trip keeps type, condition and payload")


def test_import_gives_each_record_its_own_id():
    """Records sharing an id (or all missing one) still come out distinct."""
    queues = make_manager()
    payload = json.dumps({"actions": [
        {"id": "x", "type": "attack", "onSuccess": "x"},
        {"id": "x", "type": "movement"},
        {"type": "endTurn"},
        {"type": "endTurn"},
    ]})

    imported = queues.import_queue("hero", payload)

    ids = [a.id for a in imported]
    assert len(set(ids)) == 4
    assert "x" not in ids
    # A shared old id resolves to its first carrier
    assert imported[0].on_success == imported[0].id
    assert [a.id for a in queues.get_queue("hero")] == ids
