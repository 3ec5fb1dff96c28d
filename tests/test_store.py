"""
Tests for the JSON design store and record (de)serialization.
"""

import json
import math

import pytest

from roomplanner import (DesignData, DesignRecord, DesignStore, FurnitureItem, FurnitureKind,
                         LayoutState, PersistenceError, UnknownKindError, default_store_path)
from roomplanner.store import STORE_ENV, new_record


def _write(path, payload):
    path.write_text(json.dumps(payload), encoding="utf-8")


class TestFurnitureRecords:

    def test_table_keys(self):
        item = FurnitureItem(id=3, kind=FurnitureKind.TABLE, position=[1.0, 0.0, -1.0],
                             rotation=math.pi, color="#A0522D", size=[1.5, 0.05, 1.0])
        d = item.to_dict()
        assert d == {"id": 3, "type": "table", "position": [1.0, 0.0, -1.0],
                     "rotation": math.pi, "color": "#A0522D", "size": [1.5, 0.05, 1.0]}

    def test_chair_has_no_size(self):
        d = FurnitureItem(id=1, kind=FurnitureKind.CHAIR).to_dict()
        assert "size" not in d

    def test_legacy_rotation_triple(self):
        item = FurnitureItem.from_dict({"id": 1, "type": "chair", "position": [0, 0, 0],
                                        "rotation": [0, 1.5, 0], "color": "#8B4513"})
        assert item.rotation == 1.5

    def test_table_without_size_gets_default(self):
        item = FurnitureItem.from_dict({"id": 2, "type": "table"})
        assert item.size == [1.5, 0.05, 1.0]

    def test_unknown_kind(self):
        with pytest.raises(UnknownKindError):
            FurnitureItem.from_dict({"id": 1, "type": "lamp"})

    def test_bad_position(self):
        with pytest.raises(ValueError):
            FurnitureItem.from_dict({"id": 1, "type": "chair", "position": [0, 0]})


class TestDesignData:

    def test_defaults_for_missing_keys(self):
        data = DesignData.from_dict({})
        assert data.room_size == [5.0, 3.0, 5.0]
        assert data.wall_color == "#f5f5f5"
        assert data.floor_color == "#e0e0e0"
        assert data.light_intensity == 1.0
        assert data.furniture == []

    def test_zero_light_falls_back(self):
        assert DesignData.from_dict({"lightIntensity": 0}).light_intensity == 1.0

    def test_unknown_furniture_skipped(self):
        data = DesignData.from_dict({"furniture": [
            {"id": 1, "type": "sofa"},
            {"id": 2, "type": "chair", "position": [1, 0, 1]},
        ]})
        assert [f.id for f in data.furniture] == [2]

    def test_bad_room_size(self):
        with pytest.raises(ValueError):
            DesignData.from_dict({"roomSize": [5, 3]})


class TestDesignStore:

    def test_missing_file_is_empty(self, tmp_path):
        assert DesignStore(tmp_path / "designs.json").load_designs() == []

    def test_save_and_reload(self, tmp_path):
        state = LayoutState()
        chair = state.add_furniture(FurnitureKind.CHAIR)
        table = state.add_furniture(FurnitureKind.TABLE)
        state.attempt_move(chair.id, 1.0, -2.0)
        state.update_furniture(table.id, rotation=math.pi, color="#123456")
        state.set_light_intensity(1.5)

        store = DesignStore(tmp_path / "designs.json")
        store.upsert(new_record("living", "Living room", state.to_data()))
        (rec,) = store.load_designs()
        assert rec.id == "living"
        assert rec.name == "Living room"

        restored = LayoutState(rec.data)
        assert restored.light_intensity == 1.5
        assert restored.get(chair.id).position == [1.0, 0.0, -2.0]
        assert restored.get(table.id).rotation == pytest.approx(math.pi)
        assert restored.get(table.id).color == "#123456"
        assert restored.get(table.id).size == [1.5, 0.05, 1.0]

    def test_file_layout(self, tmp_path):
        path = tmp_path / "designs.json"
        DesignStore(path).upsert(new_record("a"))
        raw = json.loads(path.read_text(encoding="utf-8"))
        assert isinstance(raw, list)
        assert set(raw[0]) == {"id", "name", "createdAt", "updatedAt", "thumbnail", "data"}
        assert set(raw[0]["data"]) == {"roomSize", "wallColor", "floorColor", "furniture", "lightIntensity"}
        assert raw[0]["createdAt"].endswith("Z")

    def test_upsert_replaces_by_id(self, tmp_path):
        store = DesignStore(tmp_path / "designs.json")
        store.upsert(new_record("a", "first"))
        store.upsert(new_record("b", "other"))
        store.upsert(new_record("a", "second"))
        names = {r.id: r.name for r in store.load_designs()}
        assert names == {"a": "second", "b": "other"}

    def test_not_json_is_empty(self, tmp_path):
        path = tmp_path / "designs.json"
        path.write_text("{not json", encoding="utf-8")
        assert DesignStore(path).load_designs() == []

    def test_not_a_list_is_empty(self, tmp_path):
        path = tmp_path / "designs.json"
        _write(path, {"id": "x"})
        assert DesignStore(path).load_designs() == []

    def test_broken_records_skipped_or_defaulted(self, tmp_path):
        path = tmp_path / "designs.json"
        _write(path, [
            {"name": "no id"},
            "not a record",
            {"id": "bad", "name": "Bad", "data": {"roomSize": "huge"}},
        ])
        (rec,) = DesignStore(path).load_designs()
        assert rec.id == "bad"
        assert rec.data.room_size == [5.0, 3.0, 5.0]

    def test_open_design_creates_default(self, tmp_path):
        store = DesignStore(tmp_path / "designs.json")
        rec = store.open_design("kitchen")
        assert rec.name == "New Room Design"
        assert rec.thumbnail == "/placeholder.svg?height=100&width=200"
        assert [r.id for r in store.load_designs()] == ["kitchen"]

    def test_unwritable_location_raises(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        store = DesignStore(blocker / "designs.json")
        with pytest.raises(PersistenceError):
            store.save_designs([new_record("a")])


class TestStorePath:

    def test_env_wins(self, monkeypatch, tmp_path):
        monkeypatch.setenv(STORE_ENV, str(tmp_path / "env.json"))
        assert default_store_path(str(tmp_path / "settings.json")) == tmp_path / "env.json"

    def test_settings_then_home(self, monkeypatch, tmp_path):
        monkeypatch.delenv(STORE_ENV, raising=False)
        assert default_store_path(str(tmp_path / "settings.json")) == tmp_path / "settings.json"
        assert default_store_path().name == "designs.json"


class TestUnreadableFurniture:

    def test_non_object_entries_are_skipped(self):
        data = DesignData.from_dict({"furniture": [None, 7, {"id": 2, "type": "chair"}]})
        assert [f.id for f in data.furniture] == [2]

    def test_record_survives_and_is_kept_on_next_save(self, tmp_path):
        path = tmp_path / "designs.json"
        _write(path, [{"id": "a", "name": "Den", "createdAt": "2024-01-02T03:04:05.000Z",
                       "updatedAt": "2024-01-02T03:04:05.000Z", "thumbnail": "t",
                       "data": {"roomSize": [6, 3, 4], "furniture": [None]}}])
        store = DesignStore(path)
        (rec,) = store.load_designs()
        assert rec.id == "a"
        assert rec.name == "Den"
        assert rec.data.room_size == [6.0, 3.0, 4.0]

        store.upsert(new_record("b"))
        raw = json.loads(path.read_text(encoding="utf-8"))
        assert [r["id"] for r in raw] == ["a", "b"]
        assert raw[0]["createdAt"] == "2024-01-02T03:04:05.000Z"


class TestRoundTrip:

    def test_record_reloads_field_for_field(self, tmp_path):
        chair = FurnitureItem(id=4, kind=FurnitureKind.CHAIR, position=[-1.25, 0.0, 0.875],
                              rotation=1.9634954084936207, color="#1a2b3c")
        table = FurnitureItem(id=9, kind=FurnitureKind.TABLE, position=[0.3333333333333333, 0.0, -0.5],
                              rotation=math.pi / 12, color="#A0522D", size=[2.25, 0.05, 0.75])
        record = DesignRecord(
            id="study", name="Study", created_at="2024-05-01T10:00:00.000Z",
            updated_at="2024-05-02T11:30:15.250Z", thumbnail="/placeholder.svg?height=100&width=200",
            data=DesignData(room_size=[6.5, 2.75, 4.1], wall_color="#fafafa", floor_color="#303030",
                            furniture=[chair, table], light_intensity=1.35),
        )
        store = DesignStore(tmp_path / "designs.json")
        store.save_designs([record])
        loaded = store.load_designs()
        assert loaded == [record]
        assert [f.id for f in loaded[0].data.furniture] == [4, 9]
        assert loaded[0].data.furniture[1].position[0] == 0.3333333333333333
