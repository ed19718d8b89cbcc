"""Tests for target list loading."""

from __future__ import annotations

import json

import pytest

from src.collector.targets import Target, load_targets


class TestLoadTargets:
    def test_json_with_zip_key(self, tmp_path):
        path = tmp_path / "targets.json"
        path.write_text(json.dumps([
            {"zip": "94107", "query": "Honda Civic"},
            {"zip": "90015", "query": "Tesla Model 3"},
        ]), encoding="utf-8")

        targets = load_targets(path)

        assert targets == [
            Target(region="94107", query="Honda Civic"),
            Target(region="90015", query="Tesla Model 3"),
        ]

    def test_order_preserved(self, tmp_path):
        path = tmp_path / "targets.json"
        path.write_text(json.dumps([{"zip": str(z), "query": "x"} for z in (3, 1, 2)]), encoding="utf-8")
        assert [t.region for t in load_targets(path)] == ["3", "1", "2"]

    def test_numeric_zip(self, tmp_path):
        path = tmp_path / "targets.json"
        path.write_text('[{"zip": 94107, "query": "Civic"}]', encoding="utf-8")
        assert load_targets(path)[0].region == "94107"

    def test_yaml(self, tmp_path):
        path = tmp_path / "targets.yaml"
        path.write_text("- region: '10001'\n  query: BMW 3 Series\n", encoding="utf-8")
        targets = load_targets(path)
        assert targets[0].region == "10001"
        assert targets[0].query == "BMW 3 Series"

    def test_empty_list(self, tmp_path):
        path = tmp_path / "targets.json"
        path.write_text("[]", encoding="utf-8")
        assert load_targets(path) == []

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_targets(tmp_path / "nope.json")

    def test_not_a_list(self, tmp_path):
        path = tmp_path / "targets.json"
        path.write_text('{"zip": "94107", "query": "Civic"}', encoding="utf-8")
        with pytest.raises(ValueError, match="list"):
            load_targets(path)

    def test_missing_query(self, tmp_path):
        path = tmp_path / "targets.json"
        path.write_text('[{"zip": "94107"}]', encoding="utf-8")
        with pytest.raises(ValueError):
            load_targets(path)

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "targets.json"
        path.write_text("[{", encoding="utf-8")
        with pytest.raises(ValueError):
            load_targets(path)

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "targets.yml"
        path.write_text("- zip: [94107\n", encoding="utf-8")
        with pytest.raises(ValueError, match="YAML"):
            load_targets(path)
