"""
Canvas engine for one flow.

CanvasState is the in-memory arena of nodes and edges keyed by id.
CanvasController is the only writer: it loads the flow, applies drags
optimistically, persists them in the background and reverts on failure.
"""

import logging
import threading
from collections import OrderedDict
from concurrent.futures import Executor, Future
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from infinity_timeline.core.exceptions import AuthorizationError, ReferentialError, TimelineError
from infinity_timeline.core.node_registry import resolve
from infinity_timeline.editor.add_menu import AddNodeMenu
from infinity_timeline.editor.detail_editor import NodeDetailEditor
from infinity_timeline.editor.notifications import Notifier
from infinity_timeline.schemas import editor as editor_schemas
from infinity_timeline.schemas.flow import Edge, EdgeCreate, FlowGraph, Node

logger = logging.getLogger(__name__)

MIN_ZOOM = 0.1
MAX_ZOOM = 1.5
DEFAULT_ZOOM = 0.8
GRID_GAP = 20
EDGE_STROKE_WIDTH = 2
DEFAULT_MINIMAP_COLOR = "#00f5ff"
FIT_PADDING = 0.1


def clamp_zoom(zoom: float) -> float:
    return max(MIN_ZOOM, min(MAX_ZOOM, zoom))


@dataclass
class Viewport:
    x: float = 0.0
    y: float = 0.0
    zoom: float = DEFAULT_ZOOM
    width: float = 1200.0
    height: float = 800.0

    def pan(self, dx: float, dy: float) -> None:
        self.x += dx
        self.y += dy

    def zoom_to(self, zoom: float) -> float:
        self.zoom = clamp_zoom(zoom)
        return self.zoom

    def zoom_by(self, factor: float) -> float:
        return self.zoom_to(self.zoom * factor)

    def fit_to_nodes(self, nodes: Iterable[Node]) -> None:
        """Zoom and pan so every node is visible, within the zoom limits."""
        nodes = list(nodes)
        if not nodes:
            self.x, self.y, self.zoom = 0.0, 0.0, DEFAULT_ZOOM
            return

        boxes = []
        for node in nodes:
            descriptor = resolve(node.node_type)
            width = node.width or descriptor.default_width
            height = node.height or descriptor.default_height
            boxes.append((node.position_x, node.position_y, width, height))

        min_x = min(x for x, _, _, _ in boxes)
        min_y = min(y for _, y, _, _ in boxes)
        max_x = max(x + w for x, _, w, _ in boxes)
        max_y = max(y + h for _, y, _, h in boxes)

        bounds_width = max(max_x - min_x, 1.0) * (1 + 2 * FIT_PADDING)
        bounds_height = max(max_y - min_y, 1.0) * (1 + 2 * FIT_PADDING)
        self.zoom = clamp_zoom(min(self.width / bounds_width, self.height / bounds_height))

        # Centre the bounds in the viewport
        center_x = (min_x + max_x) / 2
        center_y = (min_y + max_y) / 2
        self.x = self.width / 2 - center_x * self.zoom
        self.y = self.height / 2 - center_y * self.zoom

    def to_schema(self) -> editor_schemas.ViewportState:
        return editor_schemas.ViewportState(x=self.x, y=self.y, zoom=self.zoom)


class CanvasState:
    """Nodes and edges of the flow on screen, keyed by id."""

    def __init__(self):
        self._lock = threading.RLock()
        self._nodes: Dict[int, Node] = OrderedDict()
        self._edges: Dict[int, Edge] = OrderedDict()

    def replace(self, nodes: Iterable[Node], edges: Iterable[Edge]) -> None:
        with self._lock:
            self._nodes = OrderedDict((node.id, node) for node in nodes)
            self._edges = OrderedDict((edge.id, edge) for edge in edges)

    def set_edges(self, edges: Iterable[Edge]) -> None:
        with self._lock:
            self._edges = OrderedDict((edge.id, edge) for edge in edges)

    def get_node(self, node_id: int) -> Optional[Node]:
        with self._lock:
            return self._nodes.get(node_id)

    def upsert_node(self, node: Node) -> None:
        with self._lock:
            self._nodes[node.id] = node

    def move_node(self, node_id: int, x: float, y: float) -> Optional[Tuple[float, float]]:
        """
        Set a node's position.

        Returns:
            The previous position, or None if the node is not on the canvas
        """
        with self._lock:
            node = self._nodes.get(node_id)
            if node is None:
                return None
            self._nodes[node_id] = node.model_copy(update={"position_x": x, "position_y": y})
            return node.position_x, node.position_y

    def remove_node(self, node_id: int) -> None:
        """Remove a node and the edges touching it."""
        with self._lock:
            self._nodes.pop(node_id, None)
            self._edges = OrderedDict(
                (edge_id, edge)
                for edge_id, edge in self._edges.items()
                if node_id not in (edge.source_node_id, edge.target_node_id)
            )

    def add_edge(self, edge: Edge) -> None:
        with self._lock:
            self._edges[edge.id] = edge

    def remove_edge(self, edge_id: int) -> None:
        with self._lock:
            self._edges.pop(edge_id, None)

    @property
    def nodes(self) -> List[Node]:
        with self._lock:
            return list(self._nodes.values())

    @property
    def edges(self) -> List[Edge]:
        with self._lock:
            return list(self._edges.values())


class CanvasController:
    """Drives the canvas of one flow through a GraphStore."""

    def __init__(
        self,
        store,
        flow_id: int,
        notifier: Optional[Notifier] = None,
        executor: Optional[Executor] = None,
        viewport: Optional[Viewport] = None,
    ):
        self.store = store
        self.flow_id = flow_id
        self.notifier = notifier or Notifier()
        self.executor = executor
        self.viewport = viewport or Viewport()
        self.state = CanvasState()
        self.graph: Optional[FlowGraph] = None

        self._lock = threading.Lock()
        # Last position the store acknowledged, per node
        self._confirmed: Dict[int, Tuple[float, float]] = {}
        # Bumped on every drag so a stale failure does not undo a newer move
        self._move_seq: Dict[int, int] = {}

    @property
    def is_admin(self) -> bool:
        return self.store.is_admin

    def _deny(self, action: str) -> None:
        self.notifier.from_error(AuthorizationError(f"Only admins can {action}"), action)

    def load(self) -> Optional[FlowGraph]:
        """Fetch the flow and fit the viewport to its nodes."""
        try:
            graph = self.store.load_flow(self.flow_id)
        except TimelineError as e:
            self.notifier.from_error(e, "load flow")
            return None

        self._apply_graph(graph)
        self.viewport.fit_to_nodes(graph.nodes)
        logger.debug(
            f"Loaded flow {self.flow_id}: {len(graph.nodes)} nodes, {len(graph.edges)} edges"
        )
        return graph

    def refresh(self) -> Optional[FlowGraph]:
        """Refetch nodes and edges, keeping the current viewport."""
        try:
            graph = self.store.load_flow(self.flow_id)
        except TimelineError as e:
            self.notifier.from_error(e, "refresh flow")
            return None
        self._apply_graph(graph)
        return graph

    def _apply_graph(self, graph: FlowGraph) -> None:
        self.graph = graph
        self.state.replace(graph.nodes, graph.edges)
        with self._lock:
            self._confirmed = {
                node.id: (node.position_x, node.position_y) for node in graph.nodes
            }

    # Drag

    def move_node(self, node_id: int, x: float, y: float) -> bool:
        """Move a node on the canvas without persisting it."""
        return self.state.move_node(node_id, x, y) is not None

    def on_node_drag_end(self, node_id: int, position: Tuple[float, float]) -> Optional[Future]:
        """
        Apply the final drag position immediately and persist it without
        blocking the caller.

        Returns:
            A future resolving to the saved node (None on failure), or None
            when the drag was refused
        """
        if not self.is_admin:
            self._deny("move nodes")
            return None

        x, y = position
        if not self.move_node(node_id, x, y):
            logger.warning(f"Drag end for node {node_id} which is not on the canvas")
            return None

        with self._lock:
            seq = self._move_seq.get(node_id, 0) + 1
            self._move_seq[node_id] = seq

        if self.executor is not None:
            return self.executor.submit(self._persist_position, node_id, x, y, seq)

        future: Future = Future()
        future.set_result(self._persist_position(node_id, x, y, seq))
        return future

    def _persist_position(self, node_id: int, x: float, y: float, seq: int) -> Optional[Node]:
        try:
            node = self.store.update_node_position(node_id, x, y)
        except TimelineError as e:
            self.notifier.from_error(e, "save node position")
            with self._lock:
                stale = self._move_seq.get(node_id) != seq
                confirmed = self._confirmed.get(node_id)
            if not stale and confirmed is not None:
                self.state.move_node(node_id, *confirmed)
                logger.info(f"Reverted node {node_id} to {confirmed}")
            return None

        with self._lock:
            # An older save finishing late must not replace a newer confirmation
            if self._move_seq.get(node_id) == seq:
                self._confirmed[node_id] = (node.position_x, node.position_y)
        return node

    # Edges

    def on_connect(
        self,
        source_id: int,
        target_id: int,
        label: Optional[str] = None,
        color: Optional[str] = None,
    ) -> Optional[Edge]:
        """
        Connect two nodes. When the store rejects an endpoint, the edge list is
        refetched so the canvas matches the store again.
        """
        if not self.is_admin:
            self._deny("connect nodes")
            return None

        edge_in = EdgeCreate(
            source_node_id=source_id, target_node_id=target_id, label=label, color=color
        )
        try:
            edge = self.store.create_edge(self.flow_id, edge_in)
        except ReferentialError as e:
            self.notifier.from_error(e, "connect nodes")
            self._refetch_edges()
            return None
        except TimelineError as e:
            self.notifier.from_error(e, "connect nodes")
            return None

        self.state.add_edge(edge)
        return edge

    def delete_edge(self, edge_id: int) -> bool:
        if not self.is_admin:
            self._deny("delete edges")
            return False
        try:
            self.store.delete_edge(edge_id)
        except TimelineError as e:
            self.notifier.from_error(e, "delete edge")
            self._refetch_edges()
            return False
        self.state.remove_edge(edge_id)
        return True

    def _refetch_edges(self) -> None:
        try:
            self.state.set_edges(self.store.list_edges(self.flow_id))
        except TimelineError as e:
            self.notifier.from_error(e, "refresh connections")

    # Menus and dialogs

    def on_node_click(self, node_id: int) -> Optional[NodeDetailEditor]:
        node = self.state.get_node(node_id)
        if node is None:
            self.notifier.warning(f"Node {node_id} is no longer on the canvas")
            return None
        return NodeDetailEditor(self.store, node, self.notifier, on_change=self._on_node_changed)

    def open_add_menu(self, position: Tuple[float, float]) -> Optional[AddNodeMenu]:
        if not self.is_admin:
            self._deny("add nodes")
            return None
        return AddNodeMenu(
            self.store, self.flow_id, position, self.notifier, on_created=self._on_node_created
        )

    def _on_node_created(self, node: Node) -> None:
        self.refresh()

    def _on_node_changed(self, node_id: int, node: Optional[Node]) -> None:
        if node is None:
            self.state.remove_node(node_id)
            with self._lock:
                self._confirmed.pop(node_id, None)
        else:
            self.state.upsert_node(node)

    # Rendering

    def render(self) -> editor_schemas.CanvasSnapshot:
        """Describe the canvas as it should be drawn."""
        nodes = sorted(self.state.nodes, key=lambda node: (node.position_x, node.id))
        rendered_nodes = []
        minimap_colors = {}
        for node in nodes:
            descriptor = resolve(node.node_type)
            color = node.color or descriptor.color
            rendered_nodes.append(
                editor_schemas.CanvasNode(
                    id=node.id,
                    node_type=descriptor.node_type.value,
                    title=node.title,
                    description=node.description,
                    position=editor_schemas.Point(x=node.position_x, y=node.position_y),
                    width=node.width,
                    height=node.height,
                    color=color,
                    glow_color=node.glow_color or color,
                    shape=node.node_shape or descriptor.default_shape.value,
                    icon=descriptor.icon,
                    label=descriptor.label,
                    handles=[
                        editor_schemas.Handle(type=kind, position=side)
                        for kind, side in descriptor.handles
                    ],
                )
            )
            minimap_colors[node.id] = node.color or DEFAULT_MINIMAP_COLOR

        rendered_edges = [
            editor_schemas.CanvasEdge(
                id=edge.id,
                source=edge.source_node_id,
                target=edge.target_node_id,
                label=edge.label,
                stroke=edge.color,
                stroke_width=EDGE_STROKE_WIDTH,
                animated=edge.animated,
                marker_end=editor_schemas.EdgeMarker(color=edge.color),
            )
            for edge in self.state.edges
        ]

        return editor_schemas.CanvasSnapshot(
            flow_id=self.flow_id,
            is_admin=self.is_admin,
            nodes=rendered_nodes,
            edges=rendered_edges,
            minimap_colors=minimap_colors,
            viewport=self.viewport.to_schema(),
            grid_gap=GRID_GAP,
        )
