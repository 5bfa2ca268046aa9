"""
Headless flow editor: the canvas, the add-node menu, the node detail editor
and the date ruler, driven through a GraphStore.
"""

from infinity_timeline.editor.add_menu import AddNodeMenu
from infinity_timeline.editor.canvas import CanvasController, CanvasState, Viewport
from infinity_timeline.editor.date_ruler import DateRuler
from infinity_timeline.editor.detail_editor import NodeDetailEditor, Tab
from infinity_timeline.editor.notifications import Level, Notification, Notifier

__all__ = [
    "AddNodeMenu",
    "CanvasController",
    "CanvasState",
    "Viewport",
    "DateRuler",
    "NodeDetailEditor",
    "Tab",
    "Level",
    "Notification",
    "Notifier",
]
