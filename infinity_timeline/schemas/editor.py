from typing import Dict, List, Optional
from pydantic import BaseModel, Field
import datetime


class Point(BaseModel):
    x: float
    y: float


class Handle(BaseModel):
    type: str
    position: str


class CanvasNode(BaseModel):
    id: int
    node_type: str
    title: str
    description: Optional[str] = None
    position: Point
    width: Optional[float] = None
    height: Optional[float] = None
    color: str
    glow_color: str
    shape: str
    icon: str
    label: str
    handles: List[Handle] = Field(default_factory=list)


class EdgeMarker(BaseModel):
    type: str = "arrowclosed"
    color: str


class CanvasEdge(BaseModel):
    id: int
    source: int
    target: int
    label: Optional[str] = None
    stroke: str
    stroke_width: int = 2
    animated: bool
    marker_end: EdgeMarker


class ViewportState(BaseModel):
    x: float
    y: float
    zoom: float


class CanvasSnapshot(BaseModel):
    flow_id: int
    is_admin: bool
    nodes: List[CanvasNode] = Field(default_factory=list)
    edges: List[CanvasEdge] = Field(default_factory=list)
    minimap_colors: Dict[int, str] = Field(default_factory=dict)
    viewport: ViewportState
    grid_gap: int = 20


class DateMark(BaseModel):
    date: datetime.date
    position: float


class DateRuler(BaseModel):
    start_date: datetime.date
    end_date: datetime.date
    marks: List[DateMark] = Field(default_factory=list)


class NodeTab(BaseModel):
    name: str
    label: str
