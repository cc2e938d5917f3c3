from __future__ import annotations

import json

import pytest

from pulsewave.api.dataset import dataset_for_users, load_dataset_file
from pulsewave.api.provider import SyntheticProvider
from pulsewave.common.errors import PulsewaveError


@pytest.mark.smoke
def test_load_dataset_list_and_single_object(tmp_path) -> None:
    many = tmp_path / "many.json"
    many.write_text(json.dumps([{"username": "a", "data": [1]}, "junk"]), encoding="utf-8")
    assert load_dataset_file(many) == [{"username": "a", "data": [1]}]

    one = tmp_path / "one.json"
    one.write_text(json.dumps({"username": "b", "data": []}), encoding="utf-8")
    assert load_dataset_file(one) == [{"username": "b", "data": []}]


def test_load_dataset_rejects_scalars(tmp_path) -> None:
    p = tmp_path / "scalar.json"
    p.write_text("42", encoding="utf-8")
    with pytest.raises(PulsewaveError):
        load_dataset_file(p)


def test_dataset_for_users_keeps_order() -> None:
    prov = SyntheticProvider(days=5, seed=0)
    entries = dataset_for_users(["x", "y"], prov)
    assert [e["username"] for e in entries] == ["x", "y"]
    assert all(len(e["data"]) == 5 for e in entries)
