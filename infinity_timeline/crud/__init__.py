from . import user
from . import flow
from . import node
from . import edge
from . import comment
from . import document
from . import link
from . import kanban
from . import timeline
from . import indication

__all__ = [
    "user",
    "flow",
    "node",
    "edge",
    "comment",
    "document",
    "link",
    "kanban",
    "timeline",
    "indication",
]
