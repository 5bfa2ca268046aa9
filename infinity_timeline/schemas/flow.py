from typing import List, Optional
from pydantic import BaseModel, Field, field_validator, model_validator
from datetime import date, datetime

from infinity_timeline.models.enums import NodeShape, NodeType


# Base schema for shared properties
class FlowBase(BaseModel):
    name: Optional[str] = None
    template_id: Optional[int] = None
    client_timeline_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


# Schema for creating a flow
class FlowCreate(FlowBase):
    @model_validator(mode="after")
    def check_single_binding(self):
        if self.template_id is not None and self.client_timeline_id is not None:
            raise ValueError("A flow is bound to a template or a client timeline, not both")
        return self


# Schema for updating a flow
class FlowUpdate(BaseModel):
    name: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


# Schema for reading a flow (response model)
class Flow(FlowBase):
    id: int
    name: str
    is_template: bool
    created_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class NodeCreate(BaseModel):
    node_type: NodeType
    x: float = Field(allow_inf_nan=False)
    y: float = Field(allow_inf_nan=False)


class NodeUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    color: Optional[str] = None
    glow_color: Optional[str] = None
    node_shape: Optional[NodeShape] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value):
        if value is not None and not value.strip():
            raise ValueError("Title cannot be empty")
        return value


class NodePosition(BaseModel):
    x: float = Field(allow_inf_nan=False)
    y: float = Field(allow_inf_nan=False)


class Node(BaseModel):
    id: int
    flow_id: int
    node_type: str
    title: str
    description: Optional[str] = None
    position_x: float
    position_y: float
    width: Optional[float] = None
    height: Optional[float] = None
    color: Optional[str] = None
    glow_color: Optional[str] = None
    node_shape: str
    created_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class EdgeCreate(BaseModel):
    source_node_id: int
    target_node_id: int
    label: Optional[str] = None
    color: Optional[str] = None
    animated: bool = True


class Edge(BaseModel):
    id: int
    flow_id: int
    source_node_id: int
    target_node_id: int
    label: Optional[str] = None
    color: str
    animated: bool

    class Config:
        from_attributes = True


class FlowGraph(BaseModel):
    flow: Flow
    nodes: List[Node] = Field(default_factory=list)
    edges: List[Edge] = Field(default_factory=list)
