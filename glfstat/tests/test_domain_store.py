from __future__ import annotations

import json
from concurrent.futures import ThreadPoolExecutor

import pytest

from glfstat.errors import (
    PersistenceError,
    PlayerNotFound,
    RoundNotFound,
    ValidationError,
)
from glfstat.rounds.models import CourseType
from glfstat.rounds.service import RoundShotService
from glfstat.store.domain import DomainStore
from glfstat.store.snapshot import JsonFileSnapshotStore, MemorySnapshotStore, Snapshot


def test_create_player_requires_name_and_color(store: DomainStore) -> None:
    with pytest.raises(ValidationError):
        store.create_player("", "#fff")
    with pytest.raises(ValidationError):
        store.create_player("Alice", None)
    assert store.list_players() == []


def test_player_lifecycle(store: DomainStore, snapshots: MemorySnapshotStore) -> None:
    player = store.create_player("Alice", "#ff0000")
    assert [p.id for p in store.list_players()] == [player.id]
    assert snapshots.saves == 1

    store.delete_player(player.id)
    assert store.list_players() == []
    with pytest.raises(PlayerNotFound):
        store.delete_player(player.id)


def test_delete_player_keeps_rounds(store: DomainStore, roster) -> None:
    round_obj, alice, _ = roster
    store.delete_player(alice.id)
    assert alice.id in store.get_round(round_obj.id).players


@pytest.mark.parametrize(
    ("course_type", "holes"),
    [("championship", 18), ("academic", 9)],
)
def test_round_has_one_empty_hole_per_course_hole(
    store: DomainStore, course_type: str, holes: int
) -> None:
    player = store.create_player("Alice", "#ff0000")
    round_obj = store.create_round("2024-05-01", "Links", course_type, [player.id])
    assert list(round_obj.holes) == [str(n) for n in range(1, holes + 1)]
    assert all(shots == [] for shots in round_obj.holes.values())
    assert round_obj.course_type is CourseType(course_type)


@pytest.mark.parametrize(
    ("date", "course", "course_type", "player_ids", "message"),
    [
        (None, "Links", "academic", ["x"], "date"),
        ("01/05/2024", "Links", "academic", ["x"], "ISO-8601"),
        ("2024-05-01", "", "academic", ["x"], "course"),
        ("2024-05-01", "Links", "par3", ["x"], "courseType"),
        ("2024-05-01", "Links", "academic", [], "non-empty"),
        ("2024-05-01", "Links", "academic", "abc", "non-empty"),
        ("2024-05-01", "Links", "academic", ["ghost"], "Player with id ghost"),
    ],
)
def test_create_round_validation(
    store: DomainStore, date, course, course_type, player_ids, message: str
) -> None:
    with pytest.raises(ValidationError, match=message):
        store.create_round(date, course, course_type, player_ids)
    assert store.list_rounds() == []


def test_create_round_rejects_duplicate_players(store: DomainStore) -> None:
    player = store.create_player("Alice", "#ff0000")
    with pytest.raises(ValidationError, match="unique"):
        store.create_round("2024-05-01", "Links", "academic", [player.id, player.id])


def test_get_round_returns_copy(store: DomainStore, roster) -> None:
    round_obj, _, _ = roster
    copy = store.get_round(round_obj.id)
    copy.holes["1"].append(None)  # type: ignore[arg-type]
    assert store.get_round(round_obj.id).holes["1"] == []

    with pytest.raises(RoundNotFound):
        store.get_round("missing")


def test_list_rounds_is_summary(store: DomainStore, roster) -> None:
    round_obj, _, _ = roster
    [item] = store.list_rounds()
    assert item.model_dump() == {
        "id": round_obj.id,
        "date": "2024-05-01",
        "course": "Pine Valley",
    }


def test_state_survives_reload(tmp_path) -> None:
    path = tmp_path / "data" / "glfstat.json"
    first = DomainStore(JsonFileSnapshotStore(path))
    player = first.create_player("Alice", "#ff0000")
    round_obj = first.create_round("2024-05-01", "Links", "academic", [player.id])
    RoundShotService(first).add_shot(
        round_obj.id, "3", player_id=player.id, club="7I", distance=140, result="success"
    )

    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw["players"][0][0] == player.id
    assert raw["rounds"][0][1]["courseType"] == "academic"
    assert not path.with_suffix(".json.tmp").exists()

    second = DomainStore(JsonFileSnapshotStore(path))
    second.load()
    assert second.degraded is False
    reloaded = second.get_round(round_obj.id)
    assert reloaded.holes["3"][0].club.value == "7I"
    assert reloaded.holes["3"][0].shot_number == 1


def test_corrupt_snapshot_starts_empty_and_degraded(tmp_path) -> None:
    path = tmp_path / "glfstat.json"
    path.write_text("{not json", encoding="utf-8")
    store = DomainStore(JsonFileSnapshotStore(path))
    store.load()
    assert store.degraded is True
    assert store.list_rounds() == []


def test_malformed_entities_are_skipped() -> None:
    snapshot = Snapshot(
        players=[("p1", {"id": "p1", "name": "Alice", "color": "#f00"}), ("p2", {})],
        rounds=[],
    )
    store = DomainStore(MemorySnapshotStore(snapshot))
    store.load()
    assert [p.id for p in store.list_players()] == ["p1"]
    assert store.degraded is True


def test_snapshot_from_dict_rejects_bad_layout() -> None:
    with pytest.raises(PersistenceError):
        Snapshot.from_dict({"players": {"p1": {}}})
    with pytest.raises(PersistenceError):
        Snapshot.from_dict([])


class _FailingSnapshots(MemorySnapshotStore):
    def save(self, snapshot: Snapshot) -> None:
        raise PersistenceError("disk full")


def test_persist_failure_keeps_memory_state() -> None:
    store = DomainStore(_FailingSnapshots())
    player = store.create_player("Alice", "#ff0000")
    assert store.degraded is True
    assert [p.id for p in store.list_players()] == [player.id]


def test_failed_mutation_is_not_persisted(
    store: DomainStore, snapshots: MemorySnapshotStore, roster
) -> None:
    round_obj, _, _ = roster
    saves = snapshots.saves
    with pytest.raises(ValidationError):
        with store.mutate_round(round_obj.id):
            raise ValidationError("boom")
    assert snapshots.saves == saves


def test_clear_all_reports_counts(store: DomainStore, roster) -> None:
    assert store.clear_all() == {"rounds": 1, "players": 2}
    assert store.list_players() == []
    assert store.list_rounds() == []


def test_concurrent_appends_are_serialized(store: DomainStore, roster) -> None:
    round_obj, alice, bob = roster
    service = RoundShotService(store)

    def _add(player_id: str) -> None:
        service.add_shot(
            round_obj.id,
            "1",
            player_id=player_id,
            club="PT",
            distance=2,
            result="success",
        )

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(_add, [alice.id, bob.id] * 20))

    shots = store.get_round(round_obj.id).holes["1"]
    assert len(shots) == 40
    for player_id in (alice.id, bob.id):
        numbers = [s.shot_number for s in shots if s.player_id == player_id]
        assert sorted(numbers) == list(range(1, 21))
