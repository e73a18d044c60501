"""
Tests for the HTTP API.
"""

import pytest
from fastapi.testclient import TestClient

from py_geocache.api import main
from py_geocache.api.main import app, get_save_store
from py_geocache.db.store import MemorySaveStore


class TestGameAPI:
    """Drive a session through the API the way the map page does."""

    def setup_method(self):
        """Set up test client with an in-memory save store."""
        self.store = MemorySaveStore()
        app.dependency_overrides[get_save_store] = lambda: self.store
        self.client = TestClient(app)
        response = self.client.post("/sessions", json={})
        assert response.status_code == 201
        self.state = response.json()
        self.session_id = self.state["session_id"]

    def teardown_method(self):
        app.dependency_overrides.clear()
        main.sessions.clear()

    def url(self, path=""):
        return f"/sessions/{self.session_id}{path}"

    def game(self):
        return main.sessions[self.session_id]

    def test_root(self):
        response = self.client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "running"

    def test_new_session_state(self):
        assert self.state["held_value"] == 0
        assert (self.state["cell_i"], self.state["cell_j"]) == (0, 0)
        assert self.state["status"] == "You are not holding anything"
        size = 2 * 19 + 1
        assert self.state["active_cells"] == size * size

    def test_unknown_session(self):
        assert self.client.get("/sessions/nope").status_code == 404

    def test_unknown_profile(self):
        response = self.client.post("/sessions", json={"value_profile": "stingy"})
        assert response.status_code == 400

    def test_step(self):
        self.client.post(self.url("/move"), json={
            "lat": self.game().mapper.cell_center(0, 0).lat,
            "lng": self.game().mapper.cell_center(0, 0).lng,
        })
        response = self.client.post(self.url("/step/north"))
        assert response.status_code == 200
        data = response.json()
        assert data["spawned"] == 39
        assert data["discarded"] == 39
        assert data["player"]["cell_i"] == 1

    def test_bad_direction(self):
        assert self.client.post(self.url("/step/sideways")).status_code == 400

    def test_cells_listing(self):
        response = self.client.get(self.url("/cells"), params={"in_range_only": True})
        assert response.status_code == 200
        cells = response.json()
        assert cells
        assert all(cell["in_range"] and cell["color"] == "#3388ff" for cell in cells)
        for cell in cells:
            assert (cell["label"] is None) == (cell["value"] == 0)

    def test_popup_and_confirm(self):
        game = self.game()
        game.cell(1, 1).value = 4
        game.player.held_value = 4

        response = self.client.get(self.url("/cells/1/1/popup"))
        assert response.status_code == 200
        offer = response.json()
        assert offer["interaction"] == "craft"
        assert offer["button"] == "craft"

        response = self.client.post(self.url("/cells/1/1/confirm"), json={"offer_id": offer["offer_id"]})
        assert response.status_code == 200
        assert response.json()["cell_value"] == 8
        assert response.json()["held_value"] == 0

        repeat = self.client.post(self.url("/cells/1/1/confirm"), json={"offer_id": offer["offer_id"]})
        assert repeat.status_code == 409

    def test_popup_for_inactive_cell(self):
        assert self.client.get(self.url("/cells/500/500/popup")).status_code == 404

    def test_save_and_load(self):
        game = self.game()
        game.cell(2, 2).value = game.cell(2, 2).original_value + 2
        game.player.held_value = 1

        response = self.client.post(self.url("/save"))
        assert response.status_code == 200
        assert response.json()["notifications"] == ["game saved"]
        assert self.store.get("savedGame") is not None

        game.player.held_value = 0
        response = self.client.post(self.url("/load"))
        assert response.status_code == 200
        body = response.json()
        assert body["ok"] is True
        assert body["player"]["held_value"] == 1

    def test_slot_listing_and_deletion(self):
        self.client.post(self.url("/save"))
        self.client.post(self.url("/save"), params={"key": "second"})
        assert self.client.get("/slots").json() == ["savedGame", "second"]

        assert self.client.delete("/slots/second").status_code == 204
        assert self.client.get("/slots").json() == ["savedGame"]
        assert self.client.delete("/slots/second").status_code == 404

        response = self.client.post(self.url("/load"), params={"key": "second"})
        assert response.json()["notifications"] == ["No save data found."]

    def test_load_without_save(self):
        response = self.client.post(self.url("/load"), params={"key": "empty-slot"})
        assert response.status_code == 200
        assert response.json()["ok"] is False
        assert response.json()["notifications"] == ["No save data found."]

    def test_load_corrupt_save(self):
        self.store.set("savedGame", "{corrupt")
        response = self.client.post(self.url("/load"))
        assert response.json()["ok"] is False
        assert response.json()["notifications"] == ["Failed to load save (parse error)."]

    def test_geolocation_flow(self):
        response = self.client.post(self.url("/geolocation"), json={"enabled": True})
        assert response.json()["enabled"] is True

        assert self.client.post(self.url("/step/north")).status_code == 409

        target = self.game().mapper.cell_center(5, 6)
        response = self.client.post(self.url("/geolocation/samples"), json={"lat": target.lat, "lng": target.lng})
        assert response.status_code == 200
        assert (response.json()["cell_i"], response.json()["cell_j"]) == (5, 6)

        self.client.post(self.url("/geolocation"), json={"enabled": False})
        assert self.client.post(self.url("/step/north")).status_code == 200

    def test_samples_require_geolocation(self):
        response = self.client.post(self.url("/geolocation/samples"), json={"lat": 37.0, "lng": -122.0})
        assert response.status_code == 409

    def test_delete_session(self):
        assert self.client.delete(self.url()).status_code == 204
        assert self.client.get(self.url()).status_code == 404
