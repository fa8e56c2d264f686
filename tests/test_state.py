"""Tests for the delta state store."""

from host_sampler.state import DeltaStateStore, SamplerState


def test_missing_key_has_no_baseline():
    store = DeltaStateStore()
    snapshot, captured_at, found = store.get("sda")
    assert snapshot is None
    assert captured_at == 0.0
    assert found is False


def test_put_replaces_entry():
    store = DeltaStateStore()
    store.put("sda", {"reads": 1}, 10.0)
    store.put("sda", {"reads": 2}, 20.0)
    assert store.get("sda") == ({"reads": 2}, 20.0, True)
    assert len(store) == 1


def test_vanished_devices_are_kept():
    store = DeltaStateStore()
    store.put("sdb", 1, 10.0)
    store.put("sda", 1, 10.0)
    store.put("sda", 2, 20.0)
    assert "sdb" in store
    assert sorted(store.keys()) == ["sda", "sdb"]


def test_sampler_state_families_are_independent():
    state = SamplerState()
    state.store("disk").put("total", 1, 1.0)
    state.store("network").put("total", 2, 1.0)
    state.reset("disk")
    assert state.store("disk").get("total")[2] is False
    assert state.store("network").get("total")[2] is True


def test_instances_do_not_share_state():
    a = SamplerState()
    b = SamplerState()
    a.store("cpu").put("cpu", 1, 1.0)
    a.boot_time = 5.0
    assert len(b.store("cpu")) == 0
    assert b.boot_time is None
