"""
Graph store: the single path through which flows, nodes, edges and node
resources are read and written.

Both the REST endpoints and the headless editor use it, so capability checks,
blob cleanup and live-sync events live here rather than in the callers.
Every method returns pydantic schemas detached from the session.
"""

import logging
import math
from contextlib import contextmanager
from datetime import date
from typing import Callable, Iterator, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from infinity_timeline import crud, schemas
from infinity_timeline.core.auth import (
    Actor,
    ActorLike,
    check_flow_access,
    require_admin,
)
from infinity_timeline.core.config import settings
from infinity_timeline.core.dates import add_months
from infinity_timeline.core.exceptions import (
    InvalidInputError,
    NotFoundError,
    ReferentialError,
    StorageError,
    TransientError,
)
from infinity_timeline.core.node_registry import resolve
from infinity_timeline.db.database import SessionLocal
from infinity_timeline.models.enums import NodeType
from infinity_timeline.models.flow import Flow, TimelineNode
from infinity_timeline.redis import client as live_sync
from infinity_timeline.redis.client import RedisClient
from infinity_timeline.services.blob_storage import get_blob_store
from infinity_timeline.services.storage import BlobStore, build_blob_path, node_prefix

logger = logging.getLogger(__name__)

# Ruler range for template flows that are not bound to a timeline template
DEFAULT_TEMPLATE_MONTHS = 12


def _check_position(x: float, y: float) -> None:
    if not (math.isfinite(x) and math.isfinite(y)):
        raise InvalidInputError("Node position must be a finite coordinate")


class GraphStore:
    """Flow graph persistence on behalf of one actor."""

    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        actor: Optional[ActorLike] = None,
        blob_store: Optional[BlobStore] = None,
        redis_client: Optional[RedisClient] = None,
    ):
        self._session_factory = session_factory
        self._db: Optional[Session] = None
        if actor is not None and not isinstance(actor, Actor):
            actor = Actor.from_user(actor)
        self.actor: Optional[Actor] = actor
        self._blob_store = blob_store
        self._redis_client = redis_client

    @classmethod
    def bind(
        cls,
        db: Session,
        actor: Optional[ActorLike],
        blob_store: Optional[BlobStore] = None,
        redis_client: Optional[RedisClient] = None,
    ) -> "GraphStore":
        """Create a store that works inside an existing session (e.g. a request's)."""
        store = cls(actor=actor, blob_store=blob_store, redis_client=redis_client)
        store._db = db
        return store

    @property
    def is_admin(self) -> bool:
        return bool(self.actor and self.actor.is_admin)

    @property
    def blob_store(self) -> BlobStore:
        if self._blob_store is None:
            self._blob_store = get_blob_store()
        return self._blob_store

    @contextmanager
    def _session(self) -> Iterator[Session]:
        """
        Session for one operation. Database failures the operation did not map
        itself are rolled back and raised as domain errors.
        """
        owned = self._db is None
        db = self._session_factory() if owned else self._db
        try:
            yield db
        except IntegrityError as e:
            db.rollback()
            logger.warning(f"Write rejected by the database: {e.orig}")
            raise ReferentialError("The change conflicts with existing data") from e
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Database error: {e}")
            raise TransientError("Database unavailable, please try again") from e
        finally:
            if owned:
                db.close()

    def _publish(self, flow_id: int, event_type: str, payload: dict) -> None:
        if not settings.LIVE_SYNC_ENABLED:
            return
        client = self._redis_client or RedisClient.get_instance()
        client.publish_flow_event(
            flow_id, event_type, payload, actor_id=self.actor.id if self.actor else None
        )

    # Lookups shared by the operations below

    def _get_flow(self, db: Session, flow_id: int) -> Flow:
        flow = crud.flow.get_flow(db, flow_id=flow_id)
        if flow is None:
            raise NotFoundError("Flow not found")
        return flow

    def _get_node(
        self, db: Session, node_id: int, action_name: str, admin_only: bool
    ) -> Tuple[TimelineNode, Flow]:
        node = crud.node.get_node(db, node_id=node_id)
        if node is None:
            raise NotFoundError("Node not found")
        flow = self._get_flow(db, node.flow_id)
        check_flow_access(self.actor, flow, action_name, admin_only=admin_only)
        return node, flow

    # Flows

    def list_flows(self, skip: int = 0, limit: int = 100) -> List[schemas.flow.Flow]:
        """Admins see every flow. Clients see the instance flows of their own timelines."""
        if self.actor is None:
            return []
        with self._session() as db:
            if self.is_admin:
                flows = crud.flow.get_flows(db, skip=skip, limit=limit)
            else:
                flows = crud.flow.get_flows(
                    db, skip=skip, limit=limit, client_id=self.actor.id
                )
            return [schemas.flow.Flow.model_validate(flow) for flow in flows]

    def get_flow(self, flow_id: int) -> schemas.flow.Flow:
        with self._session() as db:
            flow = check_flow_access(self.actor, crud.flow.get_flow(db, flow_id=flow_id))
            return schemas.flow.Flow.model_validate(flow)

    def create_flow(self, flow_in: schemas.flow.FlowCreate) -> schemas.flow.Flow:
        require_admin(self.actor, "create flows")
        with self._session() as db:
            name = flow_in.name
            if flow_in.client_timeline_id is not None:
                timeline = crud.timeline.get_client_timeline(
                    db, timeline_id=flow_in.client_timeline_id
                )
                if timeline is None:
                    raise NotFoundError("Client timeline not found")
                if crud.flow.get_flow_by_client_timeline(db, timeline.id):
                    raise InvalidInputError("Client timeline already has a flow")
                name = name or timeline.name
            elif flow_in.template_id is not None:
                template = crud.timeline.get_template(db, template_id=flow_in.template_id)
                if template is None:
                    raise NotFoundError("Template not found")
                name = name or template.name

            if not name or not name.strip():
                raise InvalidInputError("Flow name is required")

            flow = crud.flow.create_flow(
                db, flow=flow_in, name=name.strip(), created_by=self.actor.id
            )
            logger.info(f"Flow {flow.id} created by user {self.actor.id}")
            return schemas.flow.Flow.model_validate(flow)

    def update_flow(
        self, flow_id: int, flow_in: schemas.flow.FlowUpdate
    ) -> schemas.flow.Flow:
        with self._session() as db:
            flow = check_flow_access(
                self.actor,
                crud.flow.get_flow(db, flow_id=flow_id),
                "update flows",
                admin_only=True,
            )
            if "name" in flow_in.model_fields_set and not (flow_in.name or "").strip():
                raise InvalidInputError("Flow name cannot be empty")
            flow = crud.flow.update_flow(db, db_flow=flow, flow=flow_in)
            return schemas.flow.Flow.model_validate(flow)

    def delete_flow(self, flow_id: int) -> schemas.flow.Flow:
        with self._session() as db:
            flow = check_flow_access(
                self.actor,
                crud.flow.get_flow(db, flow_id=flow_id),
                "delete flows",
                admin_only=True,
            )
            deleted = schemas.flow.Flow.model_validate(flow)
            node_ids = [node.id for node in crud.node.get_nodes(db, flow_id=flow_id)]
            crud.flow.delete_flow(db, db_flow=flow)

        for node_id in node_ids:
            self._remove_node_blobs(node_id)
        logger.info(f"Flow {flow_id} deleted with {len(node_ids)} nodes")
        return deleted

    def load_flow(self, flow_id: int) -> schemas.flow.FlowGraph:
        """
        Load a flow with its nodes and edges.

        Nodes are ordered by position_x, ties by insertion order. An empty flow
        is returned with empty lists.
        """
        with self._session() as db:
            flow = check_flow_access(self.actor, crud.flow.get_flow(db, flow_id=flow_id))
            return schemas.flow.FlowGraph(
                flow=schemas.flow.Flow.model_validate(flow),
                nodes=[
                    schemas.flow.Node.model_validate(node)
                    for node in crud.node.get_nodes(db, flow_id=flow_id)
                ],
                edges=[
                    schemas.flow.Edge.model_validate(edge)
                    for edge in crud.edge.get_edges(db, flow_id=flow_id)
                ],
            )

    def list_edges(self, flow_id: int) -> List[schemas.flow.Edge]:
        with self._session() as db:
            check_flow_access(self.actor, crud.flow.get_flow(db, flow_id=flow_id))
            return [
                schemas.flow.Edge.model_validate(edge)
                for edge in crud.edge.get_edges(db, flow_id=flow_id)
            ]

    def flow_date_range(self, flow_id: int, today: Optional[date] = None) -> Tuple[date, date]:
        """
        Date range shown by the ruler.

        Explicit flow dates win. Instance flows use their timeline's dates;
        template flows run from today for the template's duration.
        """
        today = today or date.today()
        with self._session() as db:
            flow = check_flow_access(self.actor, crud.flow.get_flow(db, flow_id=flow_id))
            if flow.client_timeline is not None:
                start, end = flow.client_timeline.start_date, flow.client_timeline.end_date
            else:
                months = DEFAULT_TEMPLATE_MONTHS
                if flow.template is not None and flow.template.duration_months:
                    months = flow.template.duration_months
                start, end = today, add_months(today, months)
            return flow.start_date or start, flow.end_date or end

    # Nodes

    def get_node(self, node_id: int) -> schemas.flow.Node:
        with self._session() as db:
            node, _ = self._get_node(db, node_id, "view", admin_only=False)
            return schemas.flow.Node.model_validate(node)

    def create_node(
        self, flow_id: int, node_type: NodeType, x: float, y: float
    ) -> schemas.flow.Node:
        """
        Insert a node of the given type at a canvas position, styled with the
        registry defaults and a placeholder title.
        """
        _check_position(x, y)
        descriptor = resolve(node_type)
        with self._session() as db:
            check_flow_access(
                self.actor,
                crud.flow.get_flow(db, flow_id=flow_id),
                "add nodes",
                admin_only=True,
            )
            try:
                node = crud.node.create_node(
                    db,
                    flow_id=flow_id,
                    node_type=descriptor.node_type.value,
                    title=descriptor.placeholder_title,
                    position_x=x,
                    position_y=y,
                    width=descriptor.default_width,
                    height=descriptor.default_height,
                    color=descriptor.color,
                    glow_color=descriptor.glow_color,
                    node_shape=descriptor.default_shape.value,
                    created_by=self.actor.id,
                )
            except IntegrityError as e:
                db.rollback()
                raise ReferentialError(f"Flow {flow_id} no longer exists") from e

            result = schemas.flow.Node.model_validate(node)

        logger.info(f"Node {result.id} ({result.node_type}) added to flow {flow_id}")
        self._publish(flow_id, live_sync.NODE_CREATED, result.model_dump(mode="json"))
        return result

    def update_node_position(self, node_id: int, x: float, y: float) -> schemas.flow.Node:
        _check_position(x, y)
        with self._session() as db:
            node, _ = self._get_node(db, node_id, "move nodes", admin_only=True)
            node = crud.node.update_position(db, db_node=node, x=x, y=y)
            result = schemas.flow.Node.model_validate(node)

        self._publish(
            result.flow_id, live_sync.NODE_MOVED, {"id": node_id, "x": x, "y": y}
        )
        return result

    def update_node(
        self, node_id: int, node_in: schemas.flow.NodeUpdate
    ) -> schemas.flow.Node:
        """Save the detail fields of a node in one update."""
        update_data = node_in.model_dump(exclude_unset=True)
        if "title" in update_data and not (update_data["title"] or "").strip():
            raise InvalidInputError("Title cannot be empty")
        if "node_shape" in update_data:
            if node_in.node_shape is None:
                del update_data["node_shape"]
            else:
                update_data["node_shape"] = node_in.node_shape.value

        with self._session() as db:
            node, _ = self._get_node(db, node_id, "edit nodes", admin_only=True)
            node = crud.node.update_node(db, db_node=node, update_data=update_data)
            result = schemas.flow.Node.model_validate(node)

        self._publish(result.flow_id, live_sync.NODE_UPDATED, result.model_dump(mode="json"))
        return result

    def delete_node(self, node_id: int) -> schemas.flow.Node:
        """
        Delete a node. Incident edges, comments, documents, links and kanban
        data go with it; stored document blobs are removed afterwards.
        """
        with self._session() as db:
            node, _ = self._get_node(db, node_id, "delete nodes", admin_only=True)
            result = schemas.flow.Node.model_validate(node)
            crud.node.delete_node(db, db_node=node)

        self._remove_node_blobs(node_id)
        logger.info(f"Node {node_id} deleted from flow {result.flow_id}")
        self._publish(result.flow_id, live_sync.NODE_DELETED, {"id": node_id})
        return result

    def _remove_node_blobs(self, node_id: int) -> None:
        try:
            removed = self.blob_store.remove_prefix(node_prefix(node_id))
            if removed:
                logger.info(f"Removed {removed} stored files of node {node_id}")
        except StorageError as e:
            logger.warning(f"Could not remove stored files of node {node_id}: {e}")

    # Edges

    def create_edge(
        self, flow_id: int, edge_in: schemas.flow.EdgeCreate
    ) -> schemas.flow.Edge:
        with self._session() as db:
            check_flow_access(
                self.actor,
                crud.flow.get_flow(db, flow_id=flow_id),
                "connect nodes",
                admin_only=True,
            )
            try:
                edge = crud.edge.create_edge(db, flow_id=flow_id, edge=edge_in)
            except IntegrityError as e:
                db.rollback()
                logger.warning(
                    f"Rejected edge {edge_in.source_node_id}->{edge_in.target_node_id} "
                    f"in flow {flow_id}: endpoint missing"
                )
                raise ReferentialError(
                    "Both endpoints must exist in the same flow"
                ) from e
            result = schemas.flow.Edge.model_validate(edge)

        self._publish(flow_id, live_sync.EDGE_CREATED, result.model_dump(mode="json"))
        return result

    def delete_edge(self, edge_id: int) -> schemas.flow.Edge:
        with self._session() as db:
            edge = crud.edge.get_edge(db, edge_id=edge_id)
            if edge is None:
                raise NotFoundError("Edge not found")
            check_flow_access(
                self.actor, self._get_flow(db, edge.flow_id), "delete edges", admin_only=True
            )
            result = schemas.flow.Edge.model_validate(edge)
            crud.edge.delete_edge(db, db_edge=edge)

        self._publish(result.flow_id, live_sync.EDGE_DELETED, {"id": edge_id})
        return result

    # Comments

    def list_comments(self, node_id: int) -> List[schemas.node_resources.Comment]:
        with self._session() as db:
            self._get_node(db, node_id, "view", admin_only=False)
            return [
                schemas.node_resources.Comment.model_validate(comment)
                for comment in crud.comment.get_comments(db, node_id=node_id)
            ]

    def add_comment(self, node_id: int, content: str) -> schemas.node_resources.Comment:
        """Admins and the client owning the flow may comment."""
        if not content or not content.strip():
            raise InvalidInputError("Comment cannot be empty")
        with self._session() as db:
            self._get_node(db, node_id, "comment on", admin_only=False)
            comment = crud.comment.create_comment(
                db, node_id=node_id, content=content.strip(), author_id=self.actor.id
            )
            return schemas.node_resources.Comment.model_validate(comment)

    # Documents

    def list_documents(self, node_id: int) -> List[schemas.node_resources.Document]:
        with self._session() as db:
            self._get_node(db, node_id, "view", admin_only=False)
            return [
                schemas.node_resources.Document.model_validate(document)
                for document in crud.document.get_documents(db, node_id=node_id)
            ]

    def upload_document(
        self,
        node_id: int,
        filename: str,
        data: bytes,
        content_type: Optional[str] = None,
        title: Optional[str] = None,
    ) -> schemas.node_resources.Document:
        """
        Store a file for a node: the blob first, then its metadata row.
        If the row cannot be written the blob is removed again.
        """
        with self._session() as db:
            self._get_node(db, node_id, "upload documents", admin_only=True)
            path = build_blob_path(node_id, filename)
            self.blob_store.upload(path, data, content_type)

            try:
                document = crud.document.create_document(
                    db,
                    node_id=node_id,
                    title=(title or "").strip() or filename,
                    file_path=path,
                    file_type=content_type,
                    file_size=len(data),
                    uploaded_by=self.actor.id,
                )
            except SQLAlchemyError as e:
                db.rollback()
                logger.error(f"Failed to save metadata for {path}: {e}")
                try:
                    self.blob_store.remove(path)
                except StorageError as cleanup_error:
                    logger.warning(f"Orphaned blob {path} left in storage: {cleanup_error}")
                if isinstance(e, IntegrityError):
                    raise ReferentialError("Node no longer exists") from e
                raise

            logger.info(f"Document {document.id} uploaded to node {node_id} at {path}")
            return schemas.node_resources.Document.model_validate(document)

    def download_document(
        self, document_id: int
    ) -> Tuple[schemas.node_resources.Document, bytes]:
        with self._session() as db:
            document = crud.document.get_document(db, document_id=document_id)
            if document is None:
                raise NotFoundError("Document not found")
            self._get_node(db, document.node_id, "view", admin_only=False)
            result = schemas.node_resources.Document.model_validate(document)

        return result, self.blob_store.download(result.file_path)

    def delete_document(self, document_id: int) -> schemas.node_resources.Document:
        """
        Delete a document: the blob first, then the row. When the blob cannot
        be removed the row is kept and the StorageError propagates. When the
        row cannot be deleted after the blob is gone, the failure is raised as
        a TransientError and the row is left pointing at a missing blob.
        """
        with self._session() as db:
            document = crud.document.get_document(db, document_id=document_id)
            if document is None:
                raise NotFoundError("Document not found")
            self._get_node(db, document.node_id, "delete documents", admin_only=True)
            result = schemas.node_resources.Document.model_validate(document)

            self.blob_store.remove(document.file_path)
            try:
                crud.document.delete_document(db, db_document=document)
            except SQLAlchemyError:
                logger.error(
                    f"Blob {result.file_path} removed but document {document_id} "
                    f"metadata could not be deleted"
                )
                raise

        logger.info(f"Document {document_id} deleted from node {result.node_id}")
        return result

    # Links

    def list_links(self, node_id: int) -> List[schemas.node_resources.Link]:
        with self._session() as db:
            self._get_node(db, node_id, "view", admin_only=False)
            return [
                schemas.node_resources.Link.model_validate(link)
                for link in crud.link.get_links(db, node_id=node_id)
            ]

    def add_link(
        self, node_id: int, link_in: schemas.node_resources.LinkCreate
    ) -> schemas.node_resources.Link:
        with self._session() as db:
            self._get_node(db, node_id, "add links", admin_only=True)
            link = crud.link.create_link(
                db, node_id=node_id, link=link_in, created_by=self.actor.id
            )
            return schemas.node_resources.Link.model_validate(link)

    def delete_link(self, link_id: int) -> schemas.node_resources.Link:
        with self._session() as db:
            link = crud.link.get_link(db, link_id=link_id)
            if link is None:
                raise NotFoundError("Link not found")
            self._get_node(db, link.node_id, "delete links", admin_only=True)
            result = schemas.node_resources.Link.model_validate(link)
            crud.link.delete_link(db, db_link=link)
            return result

    # Kanban

    def list_kanban(self, node_id: int) -> List[schemas.node_resources.KanbanBoard]:
        with self._session() as db:
            self._get_node(db, node_id, "view", admin_only=False)
            boards = crud.kanban.get_boards(db, node_id=node_id)
            cards = crud.kanban.get_cards_by_board(db, [board.id for board in boards])
            return [
                schemas.node_resources.KanbanBoard(
                    id=board.id,
                    node_id=board.node_id,
                    title=board.title,
                    position=board.position,
                    created_at=board.created_at,
                    cards=[
                        schemas.node_resources.KanbanCard.model_validate(card)
                        for card in cards[board.id]
                    ],
                )
                for board in boards
            ]

    def add_board(self, node_id: int, title: str) -> schemas.node_resources.KanbanBoard:
        if not title or not title.strip():
            raise InvalidInputError("Board title cannot be empty")
        with self._session() as db:
            self._get_node(db, node_id, "edit kanban boards", admin_only=True)
            board = crud.kanban.create_board(db, node_id=node_id, title=title.strip())
            return schemas.node_resources.KanbanBoard(
                id=board.id,
                node_id=board.node_id,
                title=board.title,
                position=board.position,
                created_at=board.created_at,
            )

    def add_card(
        self, board_id: int, card_in: schemas.node_resources.KanbanCardCreate
    ) -> schemas.node_resources.KanbanCard:
        with self._session() as db:
            board = crud.kanban.get_board(db, board_id=board_id)
            if board is None:
                raise NotFoundError("Board not found")
            self._get_node(db, board.node_id, "edit kanban boards", admin_only=True)
            try:
                card = crud.kanban.create_card(db, board_id=board_id, card=card_in)
            except IntegrityError as e:
                db.rollback()
                raise InvalidInputError("Card progress must be between 0 and 100") from e
            return schemas.node_resources.KanbanCard.model_validate(card)

    def delete_card(self, card_id: int) -> schemas.node_resources.KanbanCard:
        with self._session() as db:
            card = crud.kanban.get_card(db, card_id=card_id)
            if card is None:
                raise NotFoundError("Card not found")
            board = crud.kanban.get_board(db, board_id=card.board_id)
            self._get_node(db, board.node_id, "edit kanban boards", admin_only=True)
            result = schemas.node_resources.KanbanCard.model_validate(card)
            crud.kanban.delete_card(db, db_card=card)
            return result
