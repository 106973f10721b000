from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from college_admin.core.exceptions import ServiceError
from college_admin.db.session import get_db

from .schemas import (
    CustomFieldCreate,
    CustomFieldResponse,
    CustomFieldUpdate,
    StudentCustomFieldsResponse,
    StudentCustomFieldsUpdate,
)
from . import service

router = APIRouter(prefix="/api/v1/custom-fields", tags=["custom-fields"])


@router.post("", response_model=CustomFieldResponse, status_code=status.HTTP_201_CREATED)
async def define_field(
    payload: CustomFieldCreate,
    db: AsyncSession = Depends(get_db),
) -> CustomFieldResponse:
    try:
        return await service.define_field(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())


@router.get("", response_model=List[CustomFieldResponse])
async def list_fields(
    include_inactive: bool = Query(False),
    db: AsyncSession = Depends(get_db),
) -> List[CustomFieldResponse]:
    return await service.list_fields(db, include_inactive=include_inactive)


@router.patch("/{key}", response_model=CustomFieldResponse)
async def update_field(
    key: str,
    payload: CustomFieldUpdate,
    db: AsyncSession = Depends(get_db),
) -> CustomFieldResponse:
    """Relabel, make required/optional, or deactivate a field."""
    try:
        return await service.update_field(db, key, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())


@router.get("/students/{student_id}", response_model=StudentCustomFieldsResponse)
async def get_student_fields(
    student_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> StudentCustomFieldsResponse:
    try:
        return await service.get_student_fields(db, student_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())


@router.put("/students/{student_id}", response_model=StudentCustomFieldsResponse)
async def set_student_fields(
    student_id: UUID,
    payload: StudentCustomFieldsUpdate,
    db: AsyncSession = Depends(get_db),
) -> StudentCustomFieldsResponse:
    try:
        return await service.set_student_fields(db, student_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())
