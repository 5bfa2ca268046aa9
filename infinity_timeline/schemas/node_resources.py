from typing import Annotated, List, Optional
from pydantic import AfterValidator, BaseModel, Field, computed_field, field_validator
from datetime import datetime

from infinity_timeline.core.youtube import extract_video_id


def _not_blank(value: str) -> str:
    if not value or not value.strip():
        raise ValueError("Value cannot be empty")
    return value.strip()


NonBlankStr = Annotated[str, AfterValidator(_not_blank)]


class CommentCreate(BaseModel):
    content: NonBlankStr


class Comment(BaseModel):
    id: int
    node_id: int
    author_id: Optional[int] = None
    content: str
    created_at: datetime

    class Config:
        from_attributes = True


class Document(BaseModel):
    id: int
    node_id: int
    title: str
    file_path: str
    file_type: Optional[str] = None
    file_size: Optional[int] = None
    uploaded_by: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True


class LinkCreate(BaseModel):
    title: NonBlankStr
    url: NonBlankStr
    description: Optional[str] = None


class Link(BaseModel):
    id: int
    node_id: int
    title: str
    url: str
    description: Optional[str] = None
    created_by: Optional[int] = None
    created_at: datetime

    @computed_field
    @property
    def video_id(self) -> Optional[str]:
        return extract_video_id(self.url)

    class Config:
        from_attributes = True


class KanbanBoardCreate(BaseModel):
    title: NonBlankStr


class KanbanCardCreate(BaseModel):
    title: NonBlankStr
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    progress: int = Field(0, ge=0, le=100)

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, value):
        # The card form sends a comma separated string
        if isinstance(value, str):
            value = value.split(",")
        if not isinstance(value, list):
            return value
        tags = []
        for tag in value:
            tag = str(tag).strip()
            if tag and tag not in tags:
                tags.append(tag)
        return tags


class KanbanCard(BaseModel):
    id: int
    board_id: int
    title: str
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    progress: int
    position: int
    created_at: datetime

    class Config:
        from_attributes = True


class KanbanBoard(BaseModel):
    id: int
    node_id: int
    title: str
    position: int
    cards: List[KanbanCard] = Field(default_factory=list)
    created_at: datetime

    class Config:
        from_attributes = True
