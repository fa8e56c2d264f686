"""Tests for label set construction."""

from host_sampler.labels import LabelSet


def test_serialization_ignores_insertion_order():
    a = LabelSet([("ip", "10.0.0.1"), ("hostname", "h1"), ("zone", "a")])
    b = LabelSet([("zone", "a"), ("hostname", "h1"), ("ip", "10.0.0.1")])
    assert a == b
    assert a.serialize() == b.serialize()
    assert a.serialize() == "hostname#$#h1|ip#$#10.0.0.1|zone#$#a"


def test_keys_are_unique_last_value_wins():
    labels = LabelSet([("env", "dev"), ("env", "prod")])
    assert len(labels) == 1
    assert labels.get("env") == "prod"


def test_with_label_does_not_mutate_base():
    base = LabelSet.build({"hostname": "h1"})
    sda = base.with_label("disk", "sda")
    sdb = base.with_label("disk", "sdb")
    assert base.to_dict() == {"hostname": "h1"}
    assert sda.to_dict() == {"hostname": "h1", "disk": "sda"}
    assert sdb.get("disk") == "sdb"


def test_build_merges_common_and_extra():
    common = LabelSet.build({"hostname": "h1", "ip": "1.2.3.4"}, team="infra")
    labels = LabelSet.build(common, path="/data", device="/dev/sdb1")
    assert labels.serialize() == (
        "device#$#/dev/sdb1|hostname#$#h1|ip#$#1.2.3.4|path#$#/data|team#$#infra"
    )


def test_static_labels_override_host_identity():
    labels = LabelSet.build({"hostname": "detected"}, hostname="configured")
    assert labels.get("hostname") == "configured"


def test_empty_label_set():
    labels = LabelSet()
    assert labels.serialize() == ""
    assert labels.to_dict() == {}
    assert labels.get("missing", "x") == "x"
