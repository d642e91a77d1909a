"""Tests for the HTTP surface."""

import pytest
from fastapi.testclient import TestClient

from py_realm.api.main import app


def kingdom_payload():
    return {
        "nodes": [
            {"id": "c1", "kind": "country", "x": 600, "y": 400, "name": "Aldmark"},
            {"id": "pa", "kind": "province", "x": 450, "y": 400, "parent_id": "c1"},
            {"id": "pb", "kind": "province", "x": 750, "y": 400, "parent_id": "c1"},
            {"id": "ca", "kind": "city", "x": 430, "y": 380, "parent_id": "pa", "name": "Highgate"},
            {
                "id": "cb",
                "kind": "town",
                "x": 770,
                "y": 420,
                "parent_id": "pb",
                "name": "Saltmouth",
                "description_text": "A port town with a busy harbor",
            },
        ],
        "links": [{"source": "ca", "target": "cb"}],
        "seed": 3,
    }


class TestAPIEndpoints:
    """Test the layout API."""

    def setup_method(self):
        self.client = TestClient(app)

    def test_root(self):
        response = self.client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "running"
        assert data["version"] == "0.1.0"

    def test_health(self):
        response = self.client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_layout(self):
        response = self.client.post("/layout", json=kingdom_payload())
        assert response.status_code == 200
        data = response.json()
        assert data["seed"] == 3
        assert len(data["countries"]) == 1
        assert len(data["provinces"]) == 2
        assert len(data["roads"]) == 1
        assert "cb" in data["repositioned"]
        assert data["roads"][0]["points"][0] == [430.0, 380.0]

    def test_layout_is_deterministic(self):
        first = self.client.post("/layout", json=kingdom_payload()).json()
        second = self.client.post("/layout", json=kingdom_payload()).json()
        assert first == second

    def test_layout_with_overrides(self):
        payload = kingdom_payload()
        payload["overrides"] = {
            "positions": {"ca": [420, 390]},
            "disable_procedural_terrain": True,
        }
        data = self.client.post("/layout", json=payload).json()
        assert data["terrain"] == []
        assert data["positions"]["ca"] == [420.0, 390.0]

    def test_malformed_graph_is_bad_request(self):
        payload = kingdom_payload()
        payload["nodes"].append({"id": "x", "kind": "town", "x": 0, "y": 0, "parent_id": "c1"})
        response = self.client.post("/layout", json=payload)
        assert response.status_code == 400
        assert "x" in response.json()["detail"]

    def test_invalid_shape_params(self):
        payload = kingdom_payload()
        payload["shape_params"] = {"road_segments": 0}
        response = self.client.post("/layout", json=payload)
        assert response.status_code == 422

    def test_layout_report(self):
        response = self.client.post("/layout/report", json=kingdom_payload())
        assert response.status_code == 200
        data = response.json()
        assert data["invalid_regions"] == []
        assert data["sibling_overlaps"] == []

    def test_resolve_labels(self):
        payload = {
            "boxes": [
                {"owner_id": "A", "x": 0, "y": 0, "width": 60, "height": 16},
                {"owner_id": "B", "x": 10, "y": 0, "width": 60, "height": 16},
            ]
        }
        response = self.client.post("/labels/resolve", json=payload)
        assert response.status_code == 200
        data = response.json()
        assert data["converged"] is True
        assert data["offsets"]["A"] == pytest.approx([-36.0, 0.0])
        assert data["offsets"]["B"] == pytest.approx([36.0, 0.0])

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("A bustling port city with a large harbor", "coastal"),
            ("A mountain fortress overlooking the harbor", "inland"),
            ("", "inland"),
        ],
    )
    def test_classify(self, text, expected):
        response = self.client.post("/classify", json={"text": text})
        assert response.status_code == 200
        assert response.json() == {"classification": expected}
