"""Tests for workdeck.results (wait result files)."""

import json

import pytest

from workdeck.results import STATUS_WAITING, build_status_result, read_result, write_result


class TestBuildStatusResult:
    def test_fields(self):
        result = build_status_result("nginx", "cluster1", STATUS_WAITING, "polling", {"version": 3})
        assert result["name"] == "nginx"
        assert result["consumer"] == "cluster1"
        assert result["status"] == "Waiting"
        assert result["message"] == "polling"
        assert result["details"] == {"version": 3}
        assert result["updated_at"].endswith("+00:00")

    def test_details_default_to_empty(self):
        assert build_status_result("n", "c", "Available", "done")["details"] == {}


class TestWriteResult:
    def test_write_and_read(self, tmp_path):
        path = tmp_path / "nested" / "result.json"
        result = build_status_result("nginx", "cluster1", "Available", "done")

        write_result(path, result)

        assert read_result(path) == result
        assert path.read_text().endswith("\n")
        assert [p.name for p in path.parent.iterdir()] == ["result.json"]

    def test_overwrites_previous(self, tmp_path):
        path = tmp_path / "result.json"
        write_result(path, {"status": "Waiting"})
        write_result(path, {"status": "Available"})
        assert json.loads(path.read_text()) == {"status": "Available"}

    def test_failed_write_leaves_no_temp_file(self, tmp_path):
        path = tmp_path / "result.json"
        with pytest.raises(TypeError):
            write_result(path, {"bad": object()})
        assert list(tmp_path.iterdir()) == []
