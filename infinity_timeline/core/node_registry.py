"""
Static catalogue of node types.

Every member of NodeType has exactly one descriptor. Anything the registry
does not recognise is rendered as a custom node.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Union

from infinity_timeline.models.enums import NodeShape, NodeType

HANDLES = (("target", "left"), ("source", "right"), ("source", "top"), ("source", "bottom"))


@dataclass(frozen=True)
class NodeTypeDescriptor:
    node_type: NodeType
    label: str
    icon: str
    color: str
    default_shape: NodeShape = NodeShape.ROUNDED
    default_width: float = 220
    default_height: float = 100
    has_kanban_tab: bool = False
    handles: Tuple[Tuple[str, str], ...] = HANDLES

    @property
    def glow_color(self) -> str:
        return self.color

    @property
    def placeholder_title(self) -> str:
        return f"New {self.label}"


_REGISTRY: Dict[NodeType, NodeTypeDescriptor] = {
    NodeType.SERVICE: NodeTypeDescriptor(NodeType.SERVICE, "Service", "package", "#00f5ff"),
    NodeType.PRODUCT: NodeTypeDescriptor(
        NodeType.PRODUCT, "Product", "shopping-cart", "#ff00ff"
    ),
    NodeType.DELIVERABLE: NodeTypeDescriptor(
        NodeType.DELIVERABLE, "Deliverable", "target", "#00ff00"
    ),
    NodeType.LINK: NodeTypeDescriptor(NodeType.LINK, "Link", "link", "#ffff00"),
    NodeType.DOCUMENT: NodeTypeDescriptor(
        NodeType.DOCUMENT, "Document", "file-text", "#ff8800"
    ),
    NodeType.MEDIA: NodeTypeDescriptor(NodeType.MEDIA, "Media", "image", "#8800ff"),
    NodeType.YOUTUBE: NodeTypeDescriptor(NodeType.YOUTUBE, "YouTube", "video", "#ff0000"),
    NodeType.KANBAN: NodeTypeDescriptor(
        NodeType.KANBAN,
        "Kanban",
        "kanban",
        "#00ffff",
        default_width=260,
        default_height=140,
        has_kanban_tab=True,
    ),
    NodeType.MILESTONE: NodeTypeDescriptor(
        NodeType.MILESTONE, "Milestone", "milestone", "#ff4444"
    ),
    NodeType.CUSTOM: NodeTypeDescriptor(NodeType.CUSTOM, "Custom", "box", "#aaaaaa"),
}


def resolve(node_type: Optional[Union[NodeType, str]]) -> NodeTypeDescriptor:
    """
    Get the descriptor for a node type.

    Args:
        node_type: A NodeType member or its string value

    Returns:
        The matching descriptor, or the custom descriptor for unknown or
        missing types
    """
    try:
        return _REGISTRY[NodeType(node_type)]
    except ValueError:
        return _REGISTRY[NodeType.CUSTOM]


def all_descriptors() -> Tuple[NodeTypeDescriptor, ...]:
    """Descriptors in menu order."""
    return tuple(_REGISTRY[member] for member in NodeType)
