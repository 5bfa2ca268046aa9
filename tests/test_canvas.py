from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy.exc import OperationalError

from infinity_timeline import crud
from infinity_timeline.core.exceptions import StorageError
from infinity_timeline.editor import CanvasController, Level, Notifier, Viewport
from infinity_timeline.editor.canvas import CanvasState, MAX_ZOOM, MIN_ZOOM
from infinity_timeline.schemas.flow import Edge, NodeUpdate


class FailingMoves:
    """Wraps a store and fails position updates on demand."""

    def __init__(self, store):
        self._store = store
        self.fail = False

    def __getattr__(self, name):
        return getattr(self._store, name)

    def update_node_position(self, node_id, x, y):
        if self.fail:
            raise StorageError("connection lost")
        return self._store.update_node_position(node_id, x, y)


@pytest.fixture
def nodes(admin_store, instance_flow):
    first = admin_store.create_node(instance_flow.id, "service", 0, 0)
    second = admin_store.create_node(instance_flow.id, "product", 400, 200)
    return first, second


def test_load_fits_viewport(admin_store, instance_flow, nodes):
    controller = CanvasController(admin_store, instance_flow.id)
    graph = controller.load()
    assert [n.id for n in graph.nodes] == [nodes[0].id, nodes[1].id]
    assert MIN_ZOOM <= controller.viewport.zoom <= MAX_ZOOM


def test_empty_flow_keeps_default_viewport(admin_store, instance_flow):
    controller = CanvasController(admin_store, instance_flow.id)
    controller.load()
    assert controller.state.nodes == []
    assert controller.viewport.zoom == 0.8


def test_zoom_is_clamped():
    viewport = Viewport()
    assert viewport.zoom_to(5) == MAX_ZOOM
    assert viewport.zoom_by(0.01) == MIN_ZOOM


def test_drag_persists(admin_store, instance_flow, nodes):
    controller = CanvasController(admin_store, instance_flow.id)
    controller.load()

    future = controller.on_node_drag_end(nodes[0].id, (250.0, 75.5))
    saved = future.result()
    assert (saved.position_x, saved.position_y) == (250.0, 75.5)
    assert admin_store.get_node(nodes[0].id).position_x == 250.0


def test_drag_persists_in_background(admin_store, instance_flow, nodes):
    with ThreadPoolExecutor(max_workers=1) as executor:
        controller = CanvasController(admin_store, instance_flow.id, executor=executor)
        controller.load()
        future = controller.on_node_drag_end(nodes[1].id, (10, 20))
        # Applied before the write completes
        assert controller.state.get_node(nodes[1].id).position_x == 10
        assert future.result(timeout=10).position_y == 20


def test_failed_drag_reverts(admin_store, instance_flow, nodes):
    store = FailingMoves(admin_store)
    notifier = Notifier()
    controller = CanvasController(store, instance_flow.id, notifier=notifier)
    controller.load()

    controller.on_node_drag_end(nodes[0].id, (50, 50)).result()
    store.fail = True
    assert controller.on_node_drag_end(nodes[0].id, (900, 900)).result() is None

    node = controller.state.get_node(nodes[0].id)
    assert (node.position_x, node.position_y) == (50, 50)
    assert notifier.pending[-1].level == Level.ERROR


def test_stale_failure_does_not_undo_newer_move(admin_store, instance_flow, nodes):
    store = FailingMoves(admin_store)
    controller = CanvasController(store, instance_flow.id)
    controller.load()
    node_id = nodes[0].id

    controller.move_node(node_id, 300, 300)
    with controller._lock:
        controller._move_seq[node_id] = 2
    store.fail = True
    assert controller._persist_position(node_id, 100, 100, seq=1) is None
    assert controller.state.get_node(node_id).position_x == 300


def test_late_save_keeps_newer_confirmation(admin_store, instance_flow, nodes):
    controller = CanvasController(admin_store, instance_flow.id)
    controller.load()
    node_id = nodes[0].id

    with controller._lock:
        controller._move_seq[node_id] = 2
    assert controller._persist_position(node_id, 100, 100, seq=1).position_x == 100
    assert controller._confirmed[node_id] == (0, 0)


def test_database_failure_during_drag_reverts(admin_store, instance_flow, nodes, monkeypatch):
    def locked(db, **kwargs):
        raise OperationalError("UPDATE", {}, Exception("database is locked"))

    notifier = Notifier()
    with ThreadPoolExecutor(max_workers=1) as executor:
        controller = CanvasController(
            admin_store, instance_flow.id, notifier=notifier, executor=executor
        )
        controller.load()
        monkeypatch.setattr(crud.node, "update_position", locked)
        future = controller.on_node_drag_end(nodes[1].id, (50, 60))
        assert future.result(timeout=10) is None

    node = controller.state.get_node(nodes[1].id)
    assert (node.position_x, node.position_y) == (400, 200)
    notification = notifier.pending[-1]
    assert notification.level == Level.ERROR
    assert notification.message.startswith("Could not save node position")


def test_drag_to_non_finite_position_reverts(admin_store, instance_flow, nodes):
    notifier = Notifier()
    controller = CanvasController(admin_store, instance_flow.id, notifier=notifier)
    controller.load()

    assert controller.on_node_drag_end(nodes[0].id, (float("inf"), 10)).result() is None
    assert controller.state.get_node(nodes[0].id).position_x == 0
    assert notifier.pending[-1].level == Level.WARNING
    assert admin_store.get_node(nodes[0].id).position_x == 0


def test_clients_cannot_drag(client_store, instance_flow, nodes):
    notifier = Notifier()
    controller = CanvasController(client_store, instance_flow.id, notifier=notifier)
    controller.load()

    assert controller.on_node_drag_end(nodes[0].id, (99, 99)) is None
    assert controller.state.get_node(nodes[0].id).position_x == 0
    notification = notifier.pending[-1]
    assert notification.blocking is True
    assert notification.message.startswith("Permission denied")


def test_connect_and_delete_edge(admin_store, instance_flow, nodes):
    controller = CanvasController(admin_store, instance_flow.id)
    controller.load()

    edge = controller.on_connect(nodes[0].id, nodes[1].id, label="then")
    assert [e.id for e in controller.state.edges] == [edge.id]
    assert controller.delete_edge(edge.id) is True
    assert controller.state.edges == []


def test_rejected_connection_refetches_edges(admin_store, instance_flow, template_flow, nodes):
    stranger = admin_store.create_node(template_flow.id, "service", 0, 0)
    notifier = Notifier()
    controller = CanvasController(admin_store, instance_flow.id, notifier=notifier)
    controller.load()
    controller.state.set_edges([])

    assert controller.on_connect(nodes[0].id, stranger.id) is None
    assert notifier.pending[-1].level == Level.ERROR
    assert controller.state.edges == []


def test_render_snapshot(admin_store, instance_flow, nodes):
    admin_store.update_node(nodes[1].id, NodeUpdate(color="#abcdef"))
    controller = CanvasController(admin_store, instance_flow.id)
    controller.load()
    controller.on_connect(nodes[0].id, nodes[1].id)

    snapshot = controller.render()
    assert snapshot.is_admin is True
    assert [n.id for n in snapshot.nodes] == [nodes[0].id, nodes[1].id]
    assert snapshot.nodes[0].label == "Service"
    assert snapshot.nodes[1].color == "#abcdef"
    assert snapshot.minimap_colors[nodes[1].id] == "#abcdef"
    assert {h.position for h in snapshot.nodes[0].handles} == {"left", "right", "top", "bottom"}
    assert snapshot.edges[0].marker_end.color == "#00f5ff"


def test_add_menu_creates_node_and_refreshes(admin_store, instance_flow):
    controller = CanvasController(admin_store, instance_flow.id)
    controller.load()

    menu = controller.open_add_menu((120, 80))
    assert len(menu.options) == 10
    node = menu.select("deliverable")
    assert node.title == "New Deliverable"
    assert menu.is_open is False
    assert [n.id for n in controller.state.nodes] == [node.id]


def test_add_menu_stays_open_on_failure(admin_store):
    controller = CanvasController(admin_store, 999)
    menu = controller.open_add_menu((0, 0))
    assert menu.select("service") is None
    assert menu.is_open is True
    assert controller.notifier.pending[-1].message == "Could not add node: Flow not found"


def test_clients_get_no_add_menu(client_store, instance_flow):
    controller = CanvasController(client_store, instance_flow.id)
    assert controller.open_add_menu((0, 0)) is None


def test_detail_editor_changes_reach_canvas(admin_store, instance_flow, nodes):
    controller = CanvasController(admin_store, instance_flow.id)
    controller.load()

    editor = controller.on_node_click(nodes[0].id)
    editor.edit(title="Kickoff")
    assert editor.save() is True
    assert controller.state.get_node(nodes[0].id).title == "Kickoff"

    editor = controller.on_node_click(nodes[1].id)
    assert editor.delete(confirm=True) is True
    assert controller.state.get_node(nodes[1].id) is None


def test_state_removes_incident_edges():
    state = CanvasState()
    state.replace(
        [],
        [
            Edge(id=1, flow_id=1, source_node_id=1, target_node_id=2, color="#fff", animated=True),
            Edge(id=2, flow_id=1, source_node_id=2, target_node_id=3, color="#fff", animated=True),
        ],
    )
    state.remove_node(1)
    assert [e.id for e in state.edges] == [2]
