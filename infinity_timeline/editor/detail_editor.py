import enum
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Union

from pydantic import ValidationError

from infinity_timeline.core.exceptions import InvalidInputError, TimelineError
from infinity_timeline.core.node_registry import resolve
from infinity_timeline.core.youtube import extract_video_id
from infinity_timeline.editor.notifications import Notifier
from infinity_timeline.schemas.flow import Node, NodeUpdate
from infinity_timeline.schemas.node_resources import (
    Comment,
    Document,
    KanbanBoard,
    KanbanCard,
    KanbanCardCreate,
    Link,
    LinkCreate,
)

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("title", "description", "color", "glow_color", "node_shape")


class Tab(str, enum.Enum):
    DETAILS = "details"
    COMMENTS = "comments"
    DOCUMENTS = "documents"
    LINKS = "links"
    KANBAN = "kanban"


TAB_LABELS = {
    Tab.DETAILS: "Details",
    Tab.COMMENTS: "Comments",
    Tab.DOCUMENTS: "Documents",
    Tab.LINKS: "Links",
    Tab.KANBAN: "Kanban",
}


def tabs_for(node_type: str) -> List[Tab]:
    """Tabs offered for a node type; only kanban nodes get the kanban tab."""
    tabs = [Tab.DETAILS, Tab.COMMENTS, Tab.DOCUMENTS, Tab.LINKS]
    if resolve(node_type).has_kanban_tab:
        tabs.append(Tab.KANBAN)
    return tabs


@dataclass(frozen=True)
class LinkAction:
    kind: str  # "play" inline or "open" in a new tab
    target: str


def link_action(link: Union[Link, str]) -> LinkAction:
    url = link.url if isinstance(link, Link) else link
    video_id = extract_video_id(url)
    if video_id:
        return LinkAction("play", video_id)
    return LinkAction("open", url)


class NodeDetailEditor:
    """
    Modal editor for one node.

    Tab data is fetched on first view and cached for the life of the editor.
    A mutation invalidates and refetches only its own tab. Once closed, the
    editor ignores whatever results are still arriving.
    """

    def __init__(
        self,
        store,
        node: Node,
        notifier: Optional[Notifier] = None,
        on_change: Optional[Callable[[int, Optional[Node]], None]] = None,
    ):
        self.store = store
        self.node = node
        self.notifier = notifier or Notifier()
        self.on_change = on_change
        self.tabs = tabs_for(node.node_type)
        self.active_tab = Tab.DETAILS
        self.is_open = True
        self._cache: Dict[Tab, Any] = {}
        self.buffer: Dict[str, Any] = self._buffer_from(node)

    @staticmethod
    def _buffer_from(node: Node) -> Dict[str, Any]:
        return {field: getattr(node, field) for field in EDITABLE_FIELDS}

    @property
    def is_admin(self) -> bool:
        return self.store.is_admin

    # Tabs

    def select_tab(self, tab: Tab) -> Any:
        tab = Tab(tab)
        if tab not in self.tabs:
            raise InvalidInputError(f"Tab {tab.value} is not available for this node")
        self.active_tab = tab
        return self.tab_data(tab)

    def tab_data(self, tab: Tab) -> Any:
        if tab == Tab.DETAILS:
            return self.node
        if tab not in self._cache:
            data = self._fetch(tab)
            if data is None or not self.is_open:
                return data
            self._cache[tab] = data
        return self._cache[tab]

    def invalidate(self, tab: Tab) -> None:
        self._cache.pop(tab, None)

    def _fetch(self, tab: Tab) -> Optional[list]:
        loaders = {
            Tab.COMMENTS: self.store.list_comments,
            Tab.DOCUMENTS: self.store.list_documents,
            Tab.LINKS: self.store.list_links,
            Tab.KANBAN: self.store.list_kanban,
        }
        try:
            return loaders[tab](self.node.id)
        except TimelineError as e:
            self.notifier.from_error(e, f"load {TAB_LABELS[tab].lower()}")
            return None

    def _mutate(self, tab: Tab, action: str, operation: Callable[[], Any]) -> Any:
        """Run a store call for a tab, then refetch that tab."""
        if not self.is_open:
            return None
        try:
            result = operation()
        except (TimelineError, ValidationError) as e:
            self.notifier.from_error(e, action)
            return None
        if not self.is_open:
            logger.debug(f"Ignoring {action} result for closed editor of node {self.node.id}")
            return None
        self.invalidate(tab)
        self.tab_data(tab)
        return result

    # Details

    def edit(self, **fields: Any) -> None:
        unknown = set(fields) - set(EDITABLE_FIELDS)
        if unknown:
            raise InvalidInputError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")
        self.buffer.update(fields)

    def save(self) -> bool:
        """
        Persist the edit buffer in one update. On failure the editor stays open
        and the buffer keeps the user's changes.
        """
        if not self.is_open:
            return False
        if not self.is_admin:
            self.notifier.error("Permission denied: Only admins can edit nodes", blocking=True)
            return False
        title = self.buffer.get("title")
        if not title or not str(title).strip():
            self.notifier.warning("Could not save node: Title cannot be empty")
            return False

        try:
            node = self.store.update_node(self.node.id, NodeUpdate(**self.buffer))
        except (TimelineError, ValidationError) as e:
            self.notifier.from_error(e, "save node")
            return False

        if not self.is_open:
            return False
        self.node = node
        self.buffer = self._buffer_from(node)
        self.notifier.success("Node updated")
        if self.on_change is not None:
            self.on_change(node.id, node)
        return True

    def delete(self, confirm: bool = False) -> bool:
        """Delete the node with everything attached to it. Requires confirmation."""
        if not self.is_open or not confirm:
            return False
        try:
            self.store.delete_node(self.node.id)
        except TimelineError as e:
            self.notifier.from_error(e, "delete node")
            return False

        node_id = self.node.id
        self.close()
        self.notifier.success("Node deleted")
        if self.on_change is not None:
            self.on_change(node_id, None)
        return True

    # Comments

    def add_comment(self, content: str) -> Optional[Comment]:
        if not content or not content.strip():
            self.notifier.warning("Could not add comment: Comment cannot be empty")
            return None
        return self._mutate(
            Tab.COMMENTS,
            "add comment",
            lambda: self.store.add_comment(self.node.id, content),
        )

    # Documents

    def upload_document(
        self,
        filename: str,
        data: bytes,
        content_type: Optional[str] = None,
        title: Optional[str] = None,
    ) -> Optional[Document]:
        return self._mutate(
            Tab.DOCUMENTS,
            "upload document",
            lambda: self.store.upload_document(
                self.node.id, filename, data, content_type=content_type, title=title
            ),
        )

    def download_document(self, document_id: int) -> Optional[bytes]:
        try:
            _, data = self.store.download_document(document_id)
        except TimelineError as e:
            self.notifier.from_error(e, "download document")
            return None
        return data

    def delete_document(self, document_id: int) -> Optional[Document]:
        return self._mutate(
            Tab.DOCUMENTS,
            "delete document",
            lambda: self.store.delete_document(document_id),
        )

    # Links

    def add_link(
        self, title: str, url: str, description: Optional[str] = None
    ) -> Optional[Link]:
        return self._mutate(
            Tab.LINKS,
            "add link",
            lambda: self.store.add_link(
                self.node.id, LinkCreate(title=title, url=url, description=description)
            ),
        )

    def delete_link(self, link_id: int) -> Optional[Link]:
        return self._mutate(
            Tab.LINKS, "delete link", lambda: self.store.delete_link(link_id)
        )

    # Kanban

    def add_board(self, title: str) -> Optional[KanbanBoard]:
        return self._mutate(
            Tab.KANBAN, "add board", lambda: self.store.add_board(self.node.id, title)
        )

    def add_card(
        self,
        board_id: int,
        title: str,
        description: Optional[str] = None,
        tags: Union[str, List[str]] = "",
        progress: int = 0,
    ) -> Optional[KanbanCard]:
        return self._mutate(
            Tab.KANBAN,
            "add card",
            lambda: self.store.add_card(
                board_id,
                KanbanCardCreate(
                    title=title, description=description, tags=tags, progress=progress
                ),
            ),
        )

    def delete_card(self, card_id: int) -> Optional[KanbanCard]:
        return self._mutate(
            Tab.KANBAN, "delete card", lambda: self.store.delete_card(card_id)
        )

    def close(self) -> None:
        """Discard the edit buffer and cached tab data."""
        self.is_open = False
        self.buffer = {}
        self._cache.clear()
