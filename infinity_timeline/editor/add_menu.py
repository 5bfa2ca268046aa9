import logging
from typing import Callable, Optional, Tuple

from infinity_timeline.core.exceptions import TimelineError
from infinity_timeline.core.node_registry import NodeTypeDescriptor, all_descriptors
from infinity_timeline.editor.notifications import Notifier
from infinity_timeline.models.enums import NodeType
from infinity_timeline.schemas.flow import Node

logger = logging.getLogger(__name__)


class AddNodeMenu:
    """
    Context menu opened at a canvas position, offering one entry per node type.
    Selecting an entry creates the node there and closes the menu.
    """

    def __init__(
        self,
        store,
        flow_id: int,
        position: Tuple[float, float],
        notifier: Notifier,
        on_created: Optional[Callable[[Node], None]] = None,
    ):
        self.store = store
        self.flow_id = flow_id
        self.position = position
        self.notifier = notifier
        self.on_created = on_created
        self.is_open = True

    @property
    def options(self) -> Tuple[NodeTypeDescriptor, ...]:
        return all_descriptors()

    def select(self, node_type: NodeType) -> Optional[Node]:
        if not self.is_open:
            return None

        x, y = self.position
        try:
            node = self.store.create_node(self.flow_id, node_type, x, y)
        except TimelineError as e:
            # The menu stays open so the user can retry
            self.notifier.from_error(e, "add node")
            return None

        self.notifier.success("Node added")
        self.close()
        if self.on_created is not None:
            self.on_created(node)
        return node

    def close(self) -> None:
        self.is_open = False
