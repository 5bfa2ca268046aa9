from typing import List, Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from datetime import date

from infinity_timeline.models.enums import ProgressStatus, TemplateItemCategory


class FunctionResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None


class ApproveIndicationRequest(BaseModel):
    indication_id: int


class ApproveIndicationResponse(FunctionResponse):
    points_awarded: int


class AssignTimelineRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    client_id: int = Field(alias="clientId")
    template_id: int = Field(alias="templateId")
    start_date: date = Field(alias="startDate")


class AssignTimelineResponse(FunctionResponse):
    timeline_id: int
    flow_id: Optional[int] = None
    items_created: int
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class CreateClientRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    full_name: str = Field(alias="fullName", min_length=1)
    email: EmailStr
    password: str
    monthly_fee: Optional[float] = Field(None, alias="monthlyFee")


class CreateClientResponse(FunctionResponse):
    user_id: int
    email: str
    full_name: str


class ImportTimelineItem(BaseModel):
    title: str
    description: Optional[str] = None
    category: TemplateItemCategory
    display_order: int = 0
    parent_id: Optional[int] = None


class ImportTimelineRequest(BaseModel):
    name: str = Field(min_length=1)
    duration: int = Field(gt=0)
    items: List[ImportTimelineItem] = Field(default_factory=list)


class ImportTimelineResponse(FunctionResponse):
    template_id: int
    flow_id: Optional[int] = None
    items_count: int


class UpdateTimelineProgressRequest(BaseModel):
    timeline_item_id: int
    progress_status: ProgressStatus
    extra_points: int = Field(0, ge=0)


class UpdateTimelineProgressResponse(FunctionResponse):
    model_config = ConfigDict(populate_by_name=True)

    points_added: int = Field(alias="pointsAdded")
