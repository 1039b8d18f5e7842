"""
API tests: snapshot storage, layout, collapse toggle and settings via TestClient.
"""

from api.routes.hierarchy import _int_env
from conftest import make_agent, make_agents

TREE = make_agents("R", "R.A", "R.A.A1", "R.A.A2", "R.B")


def _store(client, agents=TREE, hierarchy_id="acme"):
    return client.post("/api/hierarchy", json={"hierarchyId": hierarchy_id, "agents": agents})


def _positions(layout):
    return {n["id"]: n["position"] for n in layout["nodes"]}


class TestSnapshot:
    def test_store_and_read_back(self, client, sio) -> None:
        res = _store(client)
        assert res.status_code == 200
        assert res.json()["count"] == 5
        agents = client.get("/api/hierarchy", params={"hierarchyId": "acme"}).json()["agents"]
        assert [a["id"] for a in agents] == ["R", "A", "A1", "A2", "B"]
        assert agents[0]["fullName"] == "Unknown Agent"
        assert ("hierarchy-update", {"hierarchyId": "acme", "count": 5}) in sio.events

    def test_unknown_hierarchy_is_empty(self, client) -> None:
        assert client.get("/api/hierarchy", params={"hierarchyId": "nope"}).json() == {"agents": []}

    def test_malformed_snapshot_rejected(self, client, db_dir) -> None:
        bad = [make_agent("R"), make_agent("Q.A", parent_id="R", depth=1)]
        res = _store(client, bad)
        assert res.status_code == 422
        assert res.json()["agentId"] == "A"
        assert not (db_dir / "acme").exists()

    def test_bad_hierarchy_id(self, client) -> None:
        res = _store(client, hierarchy_id="../x")
        assert res.status_code == 400

    def test_list_hierarchies(self, client) -> None:
        _store(client)
        assert client.get("/api/hierarchies").json() == {"hierarchyIds": ["acme"]}


class TestLayout:
    def test_stored_layout(self, client) -> None:
        _store(client)
        res = client.get("/api/hierarchy/layout", params={"hierarchyId": "acme"})
        assert res.status_code == 200
        body = res.json()
        assert body["collapsedNodes"] == []
        layout = body["layout"]
        assert layout["viewMode"] == "standard"
        assert layout["subtreeWidths"]["R"] == 3
        assert _positions(layout)["B"] == {"x": 480.0, "y": 260}

    def test_heatmap_spacing(self, client) -> None:
        _store(client)
        layout = client.get(
            "/api/hierarchy/layout", params={"hierarchyId": "acme", "viewMode": "heatmap"}
        ).json()["layout"]
        assert layout["nodes"][0]["type"] == "heatmap"
        assert _positions(layout)["B"] == {"x": 240.0, "y": 120}

    def test_search_filter(self, client) -> None:
        agents = [make_agent("R", fullName="Root Boss"), make_agent("R.A", fullName="Alice")]
        _store(client, agents)
        layout = client.get(
            "/api/hierarchy/layout", params={"hierarchyId": "acme", "q": "alice"}
        ).json()["layout"]
        assert layout["visibleIds"] == ["A"]
        assert layout["edges"] == []

    def test_stateless_layout(self, client) -> None:
        res = client.post("/api/hierarchy/layout", json={
            "agents": make_agents("R", "R.A", "R.B"),
            "collapsedNodes": ["R"],
            "horizontalSpacing": 100,
        })
        assert res.status_code == 200
        layout = res.json()["layout"]
        assert layout["visibleIds"] == ["R"]
        assert layout["nodes"][0]["downlineCount"] == 2
        assert layout["nodes"][0]["position"] == {"x": 0.0, "y": 0}

    def test_stateless_layout_rejects_bad_spacing(self, client) -> None:
        res = client.post("/api/hierarchy/layout", json={"agents": [], "verticalSpacing": -5})
        assert res.status_code == 400

    def test_stateless_layout_rejects_malformed(self, client) -> None:
        agents = [{"id": "A", "path": "R.B"}]
        res = client.post("/api/hierarchy/layout", json={"agents": agents})
        assert res.status_code == 422

    def test_settings_spacing_override(self, client) -> None:
        _store(client)
        client.post("/api/settings", json={
            "viewMode": "heatmap",
            "spacing": {"heatmap": {"horizontalSpacing": 100}},
        })
        layout = client.get("/api/hierarchy/layout", params={"hierarchyId": "acme"}).json()["layout"]
        assert layout["viewMode"] == "heatmap"
        assert _positions(layout)["B"] == {"x": 200.0, "y": 120}


class TestToggle:
    def test_toggle_collapses_and_expands(self, client, sio) -> None:
        _store(client)
        res = client.post("/api/hierarchy/toggle", json={"hierarchyId": "acme", "agentId": "A"})
        assert res.status_code == 200
        body = res.json()
        assert body["collapsedNodes"] == ["A"]
        assert body["layout"]["subtreeWidths"]["R"] == 2
        assert "A1" not in body["layout"]["visibleIds"]
        assert sio.events[-1][0] == "hierarchy-layout-update"

        stored = client.get("/api/hierarchy/layout", params={"hierarchyId": "acme"}).json()
        assert stored["collapsedNodes"] == ["A"]

        res = client.post("/api/hierarchy/toggle", json={"hierarchyId": "acme", "agentId": "A"})
        assert res.json()["collapsedNodes"] == []
        assert "A1" in res.json()["layout"]["visibleIds"]

    def test_toggle_unknown_agent(self, client) -> None:
        _store(client)
        res = client.post("/api/hierarchy/toggle", json={"hierarchyId": "acme", "agentId": "Z"})
        assert res.status_code == 404


class TestSettingsAndDb:
    def test_settings_round_trip(self, client) -> None:
        assert client.post("/api/settings", json={"viewMode": "heatmap"}).json() == {"success": True}
        assert client.get("/api/settings").json() == {"settings": {"viewMode": "heatmap"}}

    def test_unknown_view_mode_rejected(self, client) -> None:
        assert client.post("/api/settings", json={"viewMode": "galaxy"}).status_code == 400

    def test_clear_resets_snapshots_and_views(self, client) -> None:
        _store(client)
        client.post("/api/hierarchy/toggle", json={"hierarchyId": "acme", "agentId": "A"})
        res = client.post("/api/db/clear")
        assert res.json()["removed"] == ["acme"]
        body = client.get("/api/hierarchy/layout", params={"hierarchyId": "acme"}).json()
        assert body["collapsedNodes"] == []
        assert body["layout"]["nodes"] == []


class TestMalformedRecords:
    def test_store_rejects_non_integer_depth(self, client, db_dir) -> None:
        res = _store(client, [{"id": "R", "path": "R", "depth": "x"}])
        assert res.status_code == 422
        assert res.json()["agentId"] == "R"
        assert not (db_dir / "acme").exists()

    def test_layout_rejects_non_string_path(self, client) -> None:
        res = client.post("/api/hierarchy/layout", json={"agents": [{"id": "R", "path": 5}]})
        assert res.status_code == 422
        assert res.json()["agentId"] == "R"


class TestIntEnv:
    def test_numeric_value(self, monkeypatch) -> None:
        monkeypatch.setenv("ORGTREE_TEST_LIMIT", "42")
        assert _int_env("ORGTREE_TEST_LIMIT", 7) == 42

    def test_non_numeric_value_falls_back(self, monkeypatch) -> None:
        monkeypatch.setenv("ORGTREE_TEST_LIMIT", "lots")
        assert _int_env("ORGTREE_TEST_LIMIT", 7) == 7

    def test_unset_uses_default(self, monkeypatch) -> None:
        monkeypatch.delenv("ORGTREE_TEST_LIMIT", raising=False)
        assert _int_env("ORGTREE_TEST_LIMIT", 7) == 7


class TestApp:
    def test_health(self, client) -> None:
        assert client.get("/health").json() == {"status": "ok"}

    def test_no_static_frontend(self, client) -> None:
        res = client.get("/index.html")
        assert res.status_code == 404
        assert "Cache-Control" not in res.headers
