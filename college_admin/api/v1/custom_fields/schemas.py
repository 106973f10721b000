from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from college_admin.core.enums import CustomFieldType


class CustomFieldCreate(BaseModel):
    key: str = Field(..., min_length=1, max_length=100, pattern=r"^[a-z][a-z0-9_]*$", description="e.g. blood_group")
    label: str = Field(..., min_length=1, max_length=255)
    field_type: CustomFieldType = CustomFieldType.TEXT
    is_required: bool = False


class CustomFieldUpdate(BaseModel):
    label: Optional[str] = Field(None, min_length=1, max_length=255)
    is_required: Optional[bool] = None
    is_active: Optional[bool] = None


class CustomFieldResponse(BaseModel):
    id: UUID
    key: str
    label: str
    field_type: CustomFieldType
    is_required: bool
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class StudentCustomFieldsUpdate(BaseModel):
    """Full replacement of the student's custom field values."""

    values: Dict[str, Any] = Field(default_factory=dict)


class StudentCustomFieldsResponse(BaseModel):
    student_id: UUID
    values: Dict[str, Optional[str]] = Field(default_factory=dict)
    fields: List[CustomFieldResponse] = Field(default_factory=list)
