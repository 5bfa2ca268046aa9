from infinity_timeline.models.user import User
from infinity_timeline.models.timeline import (
    TimelineTemplate,
    TimelineTemplateItem,
    ClientTimeline,
    TimelineItem,
)
from infinity_timeline.models.indication import Indication, PointHistory
from infinity_timeline.models.flow import Flow, TimelineNode, TimelineEdge
from infinity_timeline.models.node_resources import (
    NodeComment,
    NodeDocument,
    NodeLink,
    KanbanBoard,
    KanbanCard,
)

__all__ = [
    "User",
    "TimelineTemplate",
    "TimelineTemplateItem",
    "ClientTimeline",
    "TimelineItem",
    "Indication",
    "PointHistory",
    "Flow",
    "TimelineNode",
    "TimelineEdge",
    "NodeComment",
    "NodeDocument",
    "NodeLink",
    "KanbanBoard",
    "KanbanCard",
]
