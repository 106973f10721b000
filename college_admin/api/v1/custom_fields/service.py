"""
Custom student fields: admin-defined, typed extension fields.

Values are validated against the definition's field_type and stored as normalized
strings (numbers as plain decimals, dates as ISO dates, booleans as "true"/"false").
"""

import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from college_admin.core.enums import CustomFieldType
from college_admin.core.exceptions import NotFound, ValidationError
from college_admin.core.models import CustomFieldDefinition, Student, StudentCustomField

from .schemas import (
    CustomFieldCreate,
    CustomFieldResponse,
    CustomFieldUpdate,
    StudentCustomFieldsResponse,
    StudentCustomFieldsUpdate,
)

logger = logging.getLogger(__name__)

TRUE_VALUES = {"true", "yes", "1"}
FALSE_VALUES = {"false", "no", "0"}


def normalize_value(field: CustomFieldDefinition, value: Any) -> Optional[str]:
    """Validate one value against its field type. Returns None for an empty value."""
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if value == "":
            return None

    field_type = field.field_type
    if field_type == CustomFieldType.NUMBER.value:
        if isinstance(value, bool):
            raise ValidationError(f"'{field.label}' must be a number")
        try:
            number = Decimal(str(value))
        except InvalidOperation:
            raise ValidationError(f"'{field.label}' must be a number")
        if not number.is_finite():
            raise ValidationError(f"'{field.label}' must be a number")
        return str(number)
    if field_type == CustomFieldType.DATE.value:
        if isinstance(value, date):
            return value.isoformat()
        try:
            return date.fromisoformat(str(value)).isoformat()
        except ValueError:
            raise ValidationError(f"'{field.label}' must be a date in YYYY-MM-DD format")
    if field_type == CustomFieldType.BOOLEAN.value:
        if isinstance(value, bool):
            return "true" if value else "false"
        text = str(value).lower()
        if text in TRUE_VALUES:
            return "true"
        if text in FALSE_VALUES:
            return "false"
        raise ValidationError(f"'{field.label}' must be yes or no")
    return str(value)


async def define_field(db: AsyncSession, payload: CustomFieldCreate) -> CustomFieldResponse:
    existing = await db.execute(select(CustomFieldDefinition).where(CustomFieldDefinition.key == payload.key))
    if existing.scalar_one_or_none():
        raise ValidationError(f"A custom field with key '{payload.key}' already exists")
    field = CustomFieldDefinition(
        key=payload.key,
        label=payload.label.strip(),
        field_type=payload.field_type.value,
        is_required=payload.is_required,
        is_active=True,
    )
    db.add(field)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ValidationError(f"A custom field with key '{payload.key}' already exists")
    await db.refresh(field)
    logger.info("Defined custom field %s (%s)", field.key, field.field_type)
    return CustomFieldResponse.model_validate(field)


async def update_field(db: AsyncSession, key: str, payload: CustomFieldUpdate) -> CustomFieldResponse:
    result = await db.execute(select(CustomFieldDefinition).where(CustomFieldDefinition.key == key))
    field = result.scalar_one_or_none()
    if not field:
        raise NotFound("Custom field not found")
    if payload.label is not None:
        field.label = payload.label.strip()
    if payload.is_required is not None:
        field.is_required = payload.is_required
    if payload.is_active is not None:
        field.is_active = payload.is_active
    await db.commit()
    await db.refresh(field)
    return CustomFieldResponse.model_validate(field)


async def list_fields(db: AsyncSession, include_inactive: bool = False) -> List[CustomFieldResponse]:
    stmt = select(CustomFieldDefinition)
    if not include_inactive:
        stmt = stmt.where(CustomFieldDefinition.is_active.is_(True))
    result = await db.execute(stmt.order_by(CustomFieldDefinition.label, CustomFieldDefinition.key))
    return [CustomFieldResponse.model_validate(f) for f in result.scalars().all()]


async def _active_fields(db: AsyncSession) -> Dict[str, CustomFieldDefinition]:
    result = await db.execute(select(CustomFieldDefinition).where(CustomFieldDefinition.is_active.is_(True)))
    return {f.key: f for f in result.scalars().all()}


async def get_student_fields(db: AsyncSession, student_id: UUID) -> StudentCustomFieldsResponse:
    if not await db.get(Student, student_id):
        raise NotFound("Student not found")
    fields = await list_fields(db)
    result = await db.execute(select(StudentCustomField).where(StudentCustomField.student_id == student_id))
    stored = {row.field_key: row.value for row in result.scalars().all()}
    # Values of deactivated fields are kept in storage but not shown
    values = {f.key: stored.get(f.key) for f in fields}
    return StudentCustomFieldsResponse(student_id=student_id, values=values, fields=fields)


async def set_student_fields(
    db: AsyncSession,
    student_id: UUID,
    payload: StudentCustomFieldsUpdate,
) -> StudentCustomFieldsResponse:
    """Replace the student's custom field values after validating every key and value."""
    if not await db.get(Student, student_id):
        raise NotFound("Student not found")
    fields = await _active_fields(db)

    unknown = sorted(k for k in payload.values if k not in fields)
    if unknown:
        raise ValidationError(f"Unknown custom fields: {', '.join(unknown)}")
    normalized = {key: normalize_value(fields[key], value) for key, value in payload.values.items()}
    missing = sorted(f.label for f in fields.values() if f.is_required and normalized.get(f.key) is None)
    if missing:
        raise ValidationError(f"Required custom fields are missing: {', '.join(missing)}")

    # Values of deactivated fields stay stored
    await db.execute(
        delete(StudentCustomField).where(
            StudentCustomField.student_id == student_id,
            StudentCustomField.field_key.in_(list(fields)),
        )
    )
    for key, value in normalized.items():
        if value is not None:
            db.add(StudentCustomField(student_id=student_id, field_key=key, value=value))
    await db.commit()
    logger.info("Updated %d custom fields for student %s", len(normalized), student_id)
    return await get_student_fields(db, student_id)
