import os

import pytest
from sqlalchemy.exc import OperationalError

from infinity_timeline import crud
from infinity_timeline.core.exceptions import StorageError, TransientError
from infinity_timeline.editor import Level, NodeDetailEditor, Notifier
from infinity_timeline.models.node_resources import NodeDocument
from infinity_timeline.services.storage.local_store import LocalBlobStore

from .test_nodes import add_node


def upload(client, headers, node_id, name="brief.pdf", data=b"%PDF-1.4 test", title=None):
    form = {"title": title} if title else {}
    return client.post(
        f"/api/v1/nodes/{node_id}/documents",
        headers=headers,
        files={"file": (name, data, "application/pdf")},
        data=form,
    )


def test_upload_download_delete(client, admin_headers, client_headers, instance_flow, upload_dir):
    node = add_node(client, admin_headers, instance_flow.id, "document")

    r = upload(client, admin_headers, node["id"], title="Project brief")
    assert r.status_code == 200, r.text
    document = r.json()
    assert document["title"] == "Project brief"
    assert document["file_type"] == "application/pdf"
    assert document["file_size"] == len(b"%PDF-1.4 test")
    assert document["file_path"].startswith(f"{node['id']}/")
    assert document["file_path"].endswith(".pdf")
    assert (upload_dir / document["file_path"]).is_file()

    r = client.get(f"/api/v1/documents/{document['id']}/download", headers=client_headers)
    assert r.status_code == 200
    assert r.content == b"%PDF-1.4 test"
    assert "Project%20brief" in r.headers["content-disposition"]

    r = client.delete(f"/api/v1/documents/{document['id']}", headers=admin_headers)
    assert r.status_code == 200
    assert not (upload_dir / document["file_path"]).exists()

    r = client.delete(f"/api/v1/documents/{document['id']}", headers=admin_headers)
    assert r.status_code == 404


def test_title_defaults_to_filename(client, admin_headers, template_flow):
    node = add_node(client, admin_headers, template_flow.id)
    r = upload(client, admin_headers, node["id"], name="notes.txt", data=b"hello")
    assert r.json()["title"] == "notes.txt"


def test_same_name_uploaded_twice(client, admin_headers, template_flow):
    node = add_node(client, admin_headers, template_flow.id)
    first = upload(client, admin_headers, node["id"]).json()
    second = upload(client, admin_headers, node["id"]).json()
    assert first["file_path"] != second["file_path"]

    r = client.get(f"/api/v1/nodes/{node['id']}/documents", headers=admin_headers)
    assert [d["id"] for d in r.json()] == [second["id"], first["id"]]


def test_clients_cannot_upload(client, admin_headers, client_headers, instance_flow, upload_dir):
    node = add_node(client, admin_headers, instance_flow.id)
    r = upload(client, client_headers, node["id"])
    assert r.status_code == 403
    assert list(upload_dir.iterdir()) == []


def test_failed_blob_delete_keeps_row(client, admin_headers, template_flow, db, monkeypatch):
    node = add_node(client, admin_headers, template_flow.id)
    document = upload(client, admin_headers, node["id"]).json()

    def broken_remove(self, path):
        raise StorageError("Failed to remove file: disk offline")

    monkeypatch.setattr(LocalBlobStore, "remove", broken_remove)
    r = client.delete(f"/api/v1/documents/{document['id']}", headers=admin_headers)
    assert r.status_code == 502
    assert db.query(NodeDocument).count() == 1


def test_missing_blob_on_download(client, admin_headers, template_flow, upload_dir):
    node = add_node(client, admin_headers, template_flow.id)
    document = upload(client, admin_headers, node["id"]).json()
    os.remove(upload_dir / document["file_path"])

    r = client.get(f"/api/v1/documents/{document['id']}/download", headers=admin_headers)
    assert r.status_code == 404


def test_node_delete_removes_blobs(client, admin_headers, template_flow, upload_dir, db):
    node = add_node(client, admin_headers, template_flow.id)
    upload(client, admin_headers, node["id"])
    upload(client, admin_headers, node["id"])
    assert (upload_dir / str(node["id"])).is_dir()

    r = client.delete(f"/api/v1/nodes/{node['id']}", headers=admin_headers)
    assert r.status_code == 200
    assert not (upload_dir / str(node["id"])).exists()
    assert db.query(NodeDocument).count() == 0


def test_metadata_failure_removes_blob(admin_store, template_flow, upload_dir, monkeypatch):
    node = admin_store.create_node(template_flow.id, "document", 0, 0)

    def broken_create(db, **values):
        raise OperationalError("INSERT", {}, Exception("database is locked"))

    monkeypatch.setattr(crud.document, "create_document", broken_create)
    with pytest.raises(TransientError):
        admin_store.upload_document(node.id, "brief.pdf", b"data")

    node_dir = upload_dir / str(node.id)
    assert not node_dir.exists() or list(node_dir.iterdir()) == []


def database_locked(db, **kwargs):
    raise OperationalError("DELETE", {}, Exception("database is locked"))


def test_metadata_delete_failure_is_reported(client, admin_headers, template_flow, upload_dir, db, monkeypatch):
    node = add_node(client, admin_headers, template_flow.id)
    document = upload(client, admin_headers, node["id"]).json()

    monkeypatch.setattr(crud.document, "delete_document", database_locked)
    r = client.delete(f"/api/v1/documents/{document['id']}", headers=admin_headers)
    assert r.status_code == 503
    assert not (upload_dir / document["file_path"]).exists()
    assert db.query(NodeDocument).count() == 1


def test_metadata_delete_failure_keeps_editor_open(admin_store, template_flow, upload_dir, monkeypatch):
    node = admin_store.create_node(template_flow.id, "document", 0, 0)
    document = admin_store.upload_document(node.id, "brief.pdf", b"data")
    editor = NodeDetailEditor(admin_store, node, Notifier())

    monkeypatch.setattr(crud.document, "delete_document", database_locked)
    assert editor.delete_document(document.id) is None
    assert editor.is_open
    notification = editor.notifier.pending[-1]
    assert notification.level == Level.ERROR
    assert notification.message.startswith("Could not delete document")
    assert not (upload_dir / document.file_path).exists()
