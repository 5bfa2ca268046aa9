from datetime import date

import pytest
from sqlalchemy.exc import SQLAlchemyError

from infinity_timeline import crud
from infinity_timeline.models.flow import Flow
from infinity_timeline.models.indication import Indication, PointHistory
from infinity_timeline.models.timeline import (
    ClientTimeline,
    TimelineItem,
    TimelineTemplate,
    TimelineTemplateItem,
)
from infinity_timeline.models.user import User
from infinity_timeline.services import functions as function_service

BASE = "/api/v1/functions"


@pytest.fixture
def template_items(db, template):
    items = [
        TimelineTemplateItem(
            template_id=template.id, title=title, category="FASE", display_order=order
        )
        for order, title in enumerate(["Discovery", "Launch", "Review"])
    ]
    db.add_all(items)
    db.commit()
    return items


@pytest.fixture
def indication(db, client_user):
    indication = Indication(client_id=client_user.id, indicated_name="Friend")
    db.add(indication)
    db.commit()
    db.refresh(indication)
    return indication


@pytest.fixture
def timeline_item(db, client_timeline):
    item = TimelineItem(
        client_timeline_id=client_timeline.id, title="Discovery", due_date=date(2024, 1, 1)
    )
    db.add(item)
    db.commit()
    db.refresh(item)
    return item


def test_approve_indication_awards_quarter_fee(client, admin_headers, indication, client_user, db):
    r = client.post(
        f"{BASE}/approve-indication",
        headers=admin_headers,
        json={"indication_id": indication.id},
    )
    assert r.status_code == 200
    assert r.json()["points_awarded"] == 250
    assert r.json()["success"] is True

    db.expire_all()
    assert db.get(User, client_user.id).points == 250
    assert db.get(Indication, indication.id).status == "CONCLUIDO"
    history = crud.indication.get_point_history(db, client_id=client_user.id)
    assert [(h.points_change, h.reason) for h in history] == [(250, "Indicação Aprovada")]


def test_approve_twice_awards_once(client, admin_headers, indication, client_user, db):
    url = f"{BASE}/approve-indication"
    assert client.post(url, headers=admin_headers, json={"indication_id": indication.id}).status_code == 200
    r = client.post(url, headers=admin_headers, json={"indication_id": indication.id})
    assert r.status_code == 400
    assert r.json()["detail"] == "Indication is not pending"

    db.expire_all()
    assert db.get(User, client_user.id).points == 250
    assert db.query(PointHistory).count() == 1


def test_approve_rounds_down(db, other_client):
    other_client.monthly_fee = 333
    db.commit()
    indication = Indication(client_id=other_client.id, indicated_name="Friend")
    db.add(indication)
    db.commit()

    response = function_service.approve_indication(db, indication.id)
    assert response.points_awarded == 83


def test_approve_missing_indication(client, admin_headers):
    r = client.post(
        f"{BASE}/approve-indication", headers=admin_headers, json={"indication_id": 999}
    )
    assert r.status_code == 404


def test_assign_timeline(client, admin_headers, client_user, template, template_items, db):
    r = client.post(
        f"{BASE}/assign-timeline",
        headers=admin_headers,
        json={"clientId": client_user.id, "templateId": template.id, "startDate": "2024-01-01"},
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["items_created"] == 3
    assert body["start_date"] == "2024-01-01"
    assert body["end_date"] == "2024-07-01"

    items = crud.timeline.get_timeline_items(db, client_timeline_id=body["timeline_id"])
    assert [i.due_date for i in items] == [
        date(2024, 1, 1),
        date(2024, 3, 1),
        date(2024, 4, 30),
    ]
    assert {i.status for i in items} == {"PENDENTE"}

    flow = db.get(Flow, body["flow_id"])
    assert flow.client_timeline_id == body["timeline_id"]
    assert flow.is_template is False


def test_assign_clamps_month_end(client, admin_headers, client_user, template):
    r = client.post(
        f"{BASE}/assign-timeline",
        headers=admin_headers,
        json={"client_id": client_user.id, "template_id": template.id, "start_date": "2024-08-31"},
    )
    assert r.status_code == 200
    assert r.json()["end_date"] == "2025-02-28"
    assert r.json()["items_created"] == 0
    assert r.json()["message"] == "Timeline created but no items found in template"


def test_assign_twice_rejected(client, admin_headers, client_user, template, client_timeline):
    r = client.post(
        f"{BASE}/assign-timeline",
        headers=admin_headers,
        json={"clientId": client_user.id, "templateId": template.id, "startDate": "2024-01-01"},
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "Client already has an active timeline"


def test_assign_rolls_back(client, admin_headers, client_user, template, template_items, db, monkeypatch):
    def broken(*args, **kwargs):
        raise SQLAlchemyError("insert failed")

    monkeypatch.setattr(function_service, "build_timeline_items", broken)
    r = client.post(
        f"{BASE}/assign-timeline",
        headers=admin_headers,
        json={"clientId": client_user.id, "templateId": template.id, "startDate": "2024-01-01"},
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "Failed to create timeline items"
    assert db.query(ClientTimeline).count() == 0
    assert db.query(Flow).count() == 0


def test_assign_unknown_template(client, admin_headers, client_user):
    r = client.post(
        f"{BASE}/assign-timeline",
        headers=admin_headers,
        json={"clientId": client_user.id, "templateId": 999, "startDate": "2024-01-01"},
    )
    assert r.status_code == 404


def test_create_client(client, admin_headers, db):
    r = client.post(
        f"{BASE}/create-client",
        headers=admin_headers,
        json={
            "fullName": "Maria Souza",
            "email": "maria@example.com",
            "password": "secret1",
            "monthlyFee": 1500,
        },
    )
    assert r.status_code == 200, r.text
    user = db.get(User, r.json()["user_id"])
    assert user.role == "CLIENTE"
    assert user.points == 0
    assert float(user.monthly_fee) == 1500

    r = client.post(
        "/api/v1/auth/login", data={"username": "maria@example.com", "password": "secret1"}
    )
    assert r.status_code == 200


def test_create_client_short_password(client, admin_headers):
    r = client.post(
        f"{BASE}/create-client",
        headers=admin_headers,
        json={"fullName": "Maria", "email": "maria@example.com", "password": "12345"},
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "Password must be at least 6 characters long"


def test_create_client_duplicate_email(client, admin_headers, client_user):
    r = client.post(
        f"{BASE}/create-client",
        headers=admin_headers,
        json={"fullName": "Again", "email": client_user.email, "password": "secret1"},
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "A user with this email already exists"


def test_import_timeline(client, admin_headers, db):
    r = client.post(
        f"{BASE}/import-timeline",
        headers=admin_headers,
        json={
            "name": "Scale Up",
            "duration": 3,
            "items": [
                {"title": "Month 1", "category": "MES", "display_order": 0},
                {"title": "Ads", "category": "ENTREGAVEL", "display_order": 1},
            ],
        },
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["items_count"] == 2

    template = db.get(TimelineTemplate, body["template_id"])
    assert template.description == "Imported timeline with 2 items"
    assert [i.title for i in template.items] == ["Month 1", "Ads"]
    assert db.get(Flow, body["flow_id"]).template_id == template.id


def test_import_without_items(client, admin_headers, db):
    r = client.post(
        f"{BASE}/import-timeline",
        headers=admin_headers,
        json={"name": "Empty", "duration": 3, "items": []},
    )
    assert r.status_code == 400
    assert db.query(TimelineTemplate).count() == 0


def test_import_rolls_back_on_bad_item(client, admin_headers, db):
    r = client.post(
        f"{BASE}/import-timeline",
        headers=admin_headers,
        json={
            "name": "Broken",
            "duration": 3,
            "items": [{"title": "Orphan", "category": "FOCO", "parent_id": 999}],
        },
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "Failed to create template items"
    assert db.query(TimelineTemplate).count() == 0
    assert db.query(Flow).count() == 0


@pytest.mark.parametrize(
    "status,extra,points",
    [("NO_PRAZO", 0, 25), ("ADIANTADO", 10, 35), ("ATRASADO", 10, 0)],
)
def test_update_timeline_progress(
    client, admin_headers, timeline_item, client_user, db, status, extra, points
):
    r = client.post(
        f"{BASE}/update-timeline-progress",
        headers=admin_headers,
        json={
            "timeline_item_id": timeline_item.id,
            "progress_status": status,
            "extra_points": extra,
        },
    )
    assert r.status_code == 200
    assert r.json()["pointsAdded"] == points
    assert r.json()["message"] == f"Timeline item updated successfully. {points} points added."

    db.expire_all()
    assert db.get(TimelineItem, timeline_item.id).progress_status == status
    assert db.get(User, client_user.id).points == points
    assert db.query(PointHistory).count() == (1 if points else 0)


@pytest.mark.parametrize(
    "path",
    [
        "approve-indication",
        "assign-timeline",
        "create-client",
        "import-timeline",
        "update-timeline-progress",
    ],
)
def test_functions_are_admin_only(client, client_headers, path):
    r = client.post(f"{BASE}/{path}", headers=client_headers, json={})
    assert r.status_code == 403
