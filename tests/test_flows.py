from datetime import date

from infinity_timeline.models.flow import Flow
from infinity_timeline.schemas.flow import FlowUpdate


def test_admin_creates_template_flow(client, admin_headers, template):
    r = client.post(
        "/api/v1/flows/", headers=admin_headers, json={"template_id": template.id}
    )
    assert r.status_code == 200
    body = r.json()
    assert body["name"] == "Growth Program"
    assert body["is_template"] is True


def test_flow_binding_is_exclusive(client, admin_headers, template, client_timeline):
    r = client.post(
        "/api/v1/flows/",
        headers=admin_headers,
        json={"template_id": template.id, "client_timeline_id": client_timeline.id},
    )
    assert r.status_code == 422


def test_client_timeline_has_one_flow(client, admin_headers, instance_flow, client_timeline):
    r = client.post(
        "/api/v1/flows/",
        headers=admin_headers,
        json={"client_timeline_id": client_timeline.id},
    )
    assert r.status_code == 400


def test_create_flow_unknown_template(client, admin_headers):
    r = client.post("/api/v1/flows/", headers=admin_headers, json={"template_id": 999})
    assert r.status_code == 404


def test_clients_cannot_create_flows(client, client_headers, template):
    r = client.post(
        "/api/v1/flows/", headers=client_headers, json={"template_id": template.id}
    )
    assert r.status_code == 403
    assert r.json()["detail"] == "Only admins can create flows"


def test_list_flows_by_role(
    client, admin_headers, client_headers, other_headers, template_flow, instance_flow
):
    r = client.get("/api/v1/flows/", headers=admin_headers)
    assert {f["id"] for f in r.json()} == {template_flow.id, instance_flow.id}

    r = client.get("/api/v1/flows/", headers=client_headers)
    assert [f["id"] for f in r.json()] == [instance_flow.id]

    r = client.get("/api/v1/flows/", headers=other_headers)
    assert r.json() == []


def test_template_flows_are_admin_only(client, client_headers, template_flow):
    r = client.get(f"/api/v1/flows/{template_flow.id}/graph", headers=client_headers)
    assert r.status_code == 403


def test_other_clients_cannot_view(client, other_headers, instance_flow):
    r = client.get(f"/api/v1/flows/{instance_flow.id}", headers=other_headers)
    assert r.status_code == 403


def test_missing_flow(client, admin_headers):
    r = client.get("/api/v1/flows/999/graph", headers=admin_headers)
    assert r.status_code == 404
    assert r.json()["detail"] == "Flow not found"


def test_empty_flow_graph(client, client_headers, instance_flow):
    r = client.get(f"/api/v1/flows/{instance_flow.id}/graph", headers=client_headers)
    assert r.status_code == 200
    body = r.json()
    assert body["flow"]["id"] == instance_flow.id
    assert body["nodes"] == []
    assert body["edges"] == []


def test_graph_nodes_ordered_by_x(client, admin_headers, template_flow):
    url = f"/api/v1/flows/{template_flow.id}/nodes"
    for x in (300, 100, 200):
        client.post(url, headers=admin_headers, json={"node_type": "service", "x": x, "y": 0})

    r = client.get(f"/api/v1/flows/{template_flow.id}/graph", headers=admin_headers)
    assert [n["position_x"] for n in r.json()["nodes"]] == [100, 200, 300]


def test_update_and_delete_flow(client, admin_headers, template_flow, db):
    r = client.put(
        f"/api/v1/flows/{template_flow.id}",
        headers=admin_headers,
        json={"name": "Renamed", "start_date": "2024-03-01"},
    )
    assert r.status_code == 200
    assert r.json()["name"] == "Renamed"
    assert r.json()["start_date"] == "2024-03-01"

    r = client.delete(f"/api/v1/flows/{template_flow.id}", headers=admin_headers)
    assert r.status_code == 200
    assert db.query(Flow).count() == 0


def test_instance_ruler_uses_timeline_dates(client, client_headers, instance_flow):
    r = client.get(f"/api/v1/flows/{instance_flow.id}/ruler", headers=client_headers)
    assert r.status_code == 200
    body = r.json()
    assert body["start_date"] == "2024-01-01"
    assert body["end_date"] == "2024-07-01"
    assert len(body["marks"]) == 8
    assert body["marks"][0]["position"] == 0
    assert body["marks"][-1]["position"] == 100


def test_template_ruler_spans_duration(admin_store, template_flow):
    start, end = admin_store.flow_date_range(template_flow.id, today=date(2024, 1, 31))
    assert start == date(2024, 1, 31)
    assert end == date(2024, 7, 31)


def test_explicit_flow_dates_win(admin_store, template_flow):
    admin_store.update_flow(
        template_flow.id, FlowUpdate(start_date=date(2025, 1, 1), end_date=date(2025, 3, 1))
    )
    assert admin_store.flow_date_range(template_flow.id) == (
        date(2025, 1, 1),
        date(2025, 3, 1),
    )


def test_canvas_snapshot(client, admin_headers, client_headers, instance_flow):
    url = f"/api/v1/flows/{instance_flow.id}/nodes"
    a = client.post(url, headers=admin_headers, json={"node_type": "kanban", "x": 0, "y": 0}).json()
    b = client.post(url, headers=admin_headers, json={"node_type": "media", "x": 400, "y": 0}).json()
    client.post(
        f"/api/v1/flows/{instance_flow.id}/edges",
        headers=admin_headers,
        json={"source_node_id": a["id"], "target_node_id": b["id"]},
    )

    r = client.get(f"/api/v1/flows/{instance_flow.id}/canvas", headers=client_headers)
    assert r.status_code == 200
    snapshot = r.json()
    assert snapshot["is_admin"] is False
    assert snapshot["grid_gap"] == 20
    assert [n["node_type"] for n in snapshot["nodes"]] == ["kanban", "media"]
    assert snapshot["nodes"][0]["width"] == 260
    assert snapshot["minimap_colors"][str(a["id"])] == "#00ffff"
    edge = snapshot["edges"][0]
    assert edge["stroke"] == "#00f5ff"
    assert edge["stroke_width"] == 2
    assert edge["marker_end"]["type"] == "arrowclosed"
    assert 0.1 <= snapshot["viewport"]["zoom"] <= 1.5


def test_canvas_of_foreign_flow(client, other_headers, instance_flow):
    r = client.get(f"/api/v1/flows/{instance_flow.id}/canvas", headers=other_headers)
    assert r.status_code == 403
