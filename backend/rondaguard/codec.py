"""
RondaGuard Backend - Aggregate Codec
====================================

What:  Lossless mapping between the wire shape (pydantic aggregates,
       camelCase, booleans, epoch-ms integers, nested JSON) and the row
       shape (flat snake_case column dicts, JSON as text).
How:   Scalar coercions first (to_bool, to_epoch_ms, encode_json,
       decode_json, child_id), then one encode_* / decode_* pair per
       aggregate built on them.
Who:   Services encode before calling the upsert engine and decode what
       the aggregate reader returns.

Conventions:
    - Booleans: any non-zero stored value reads back as True (drivers may
      return 0/1, Decimal, or a one-byte BIT value).
    - Timestamps: exact int conversion from int, Decimal, integral float or
      numeric text; fractional values are a SerializationError.
    - JSON snapshot: None is stored as the text `null` and read back as
      None. Only standard JSON is written (NaN/Infinity rejected).
    - Child ids: store-assigned integers, surfaced as strings.

Round-trip law: decode(encode(x)) == x for every field, except child ids,
which the store assigns on insert.
"""

import json
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from rondaguard.exceptions import SerializationError, ValidationError
from rondaguard.models import SETTINGS_ROW_ID
from rondaguard.models.aggregates import AggregateRows
from rondaguard.schemas import (
    DEFAULT_SETTINGS,
    ChecklistTemplateAggregate,
    RoundLogAggregate,
    SystemSettingsPayload,
    TaskAggregate,
    TaskChecklistEntry,
    UserIn,
    UserOut,
)

ModelT = TypeVar("ModelT", bound=BaseModel)

RootRow = Dict[str, Any]
ChildRows = Dict[str, List[Dict[str, Any]]]

_FALSE_STRINGS = {"", "0", "false", "f", "no", "n", "off"}


# ══════════════════════════════════════════════════════════════════════════
# Scalar coercions
# ══════════════════════════════════════════════════════════════════════════


def to_bool(value: Any) -> Optional[bool]:
    """Coerce a stored boolean (bool, 0/1, Decimal, BIT bytes, text) to bool."""
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float, Decimal)):
        return value != 0
    if isinstance(value, (bytes, bytearray)):
        return any(value)
    if isinstance(value, str):
        return value.strip().lower() not in _FALSE_STRINGS
    return bool(value)


def to_int(value: Any, field: str = "value") -> Optional[int]:
    """
    Convert a stored integer of any width to an exact Python int.

    Drivers may hand back BIGINT/NUMERIC columns as Decimal or text; Python
    ints are arbitrary precision, so nothing above 2^53 is lost.

    Raises:
        SerializationError: fractional, non-finite, non-numeric, or boolean input
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise SerializationError(f"{field} must be an integer, got a boolean", field=field)
    if isinstance(value, int):
        return value
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("ascii", errors="replace")
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            try:
                value = Decimal(text)
            except InvalidOperation:
                raise SerializationError(
                    f"{field} is not a number: {text!r}", field=field
                ) from None
    if isinstance(value, float):
        if not value.is_integer():
            raise SerializationError(f"{field} must be a whole number, got {value}", field=field)
        return int(value)
    if isinstance(value, Decimal):
        if not value.is_finite() or value != value.to_integral_value():
            raise SerializationError(f"{field} must be a whole number, got {value}", field=field)
        return int(value)
    raise SerializationError(
        f"{field} has unsupported type {type(value).__name__}", field=field
    )


def to_epoch_ms(value: Any, field: str = "timestamp") -> Optional[int]:
    """Timestamp columns hold epoch milliseconds; same rules as to_int."""
    return to_int(value, field=field)


def encode_json(value: Any, field: str = "checklistState") -> str:
    """
    Serialize a structured value to JSON text for storage.

    None becomes the text `null`. Values that standard JSON cannot express
    (NaN, Infinity, arbitrary objects) raise SerializationError.
    """
    try:
        return json.dumps(value, allow_nan=False, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise SerializationError(
            f"{field} cannot be stored as JSON: {e}", field=field
        ) from e


def decode_json(raw: Any, field: str = "checklistState") -> Any:
    """
    Parse stored JSON text back into structured data.

    Drivers that decode JSON columns themselves hand back dicts/lists,
    which pass through unchanged.
    """
    if raw is None:
        return None
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8")
    if isinstance(raw, str):
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise SerializationError(
                f"Stored {field} is not valid JSON", field=field, context={"position": e.pos}
            ) from e
    return raw


def child_id(value: Any) -> str:
    """Store-assigned child id as wire text."""
    return str(to_int(value, field="id"))


def parse_aggregate(model: Type[ModelT], data: Any) -> ModelT:
    """
    Validate untyped input into a wire model before it reaches the store.

    Raises:
        ValidationError: first failing field, with the total error count in context
    """
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        errors = e.errors()
        first = errors[0]
        field = ".".join(str(part) for part in first["loc"]) or None
        raise ValidationError(
            message=f"Invalid {model.__name__}: {field or 'body'}: {first['msg']}",
            field=field,
            context={"error_count": len(errors)},
        ) from e


# ══════════════════════════════════════════════════════════════════════════
# Users
# ══════════════════════════════════════════════════════════════════════════


def encode_user(user: UserIn, password_hash: Optional[str]) -> RootRow:
    """Row for `users`; password_hash is omitted when no new secret was given."""
    row = {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "active": bool(user.active),
    }
    if password_hash is not None:
        row["password_hash"] = password_hash
    return row


def decode_user(row: Any) -> UserOut:
    return UserOut(
        id=row.id,
        name=row.name,
        email=row.email,
        role=row.role,
        active=to_bool(row.active),
    )


# ══════════════════════════════════════════════════════════════════════════
# Checklist templates
# ══════════════════════════════════════════════════════════════════════════


def encode_template(template: ChecklistTemplateAggregate) -> Tuple[RootRow, ChildRows]:
    """Items become rows in submission order; the engine numbers them."""
    root = {"id": template.id, "name": template.name}
    items = [{"item_label": label} for label in template.items]
    return root, {"items": items}


def decode_template(rows: AggregateRows) -> ChecklistTemplateAggregate:
    return ChecklistTemplateAggregate(
        id=rows.root.id,
        name=rows.root.name,
        items=[item.item_label for item in rows.rows("items")],
    )


# ══════════════════════════════════════════════════════════════════════════
# Tasks
# ══════════════════════════════════════════════════════════════════════════


def encode_task(task: TaskAggregate) -> Tuple[RootRow, ChildRows]:
    """Client-sent checklist ids are dropped; the store issues new ones."""
    root = {
        "id": task.id,
        "title": task.title,
        "sector": task.sector,
        "ticket_id": task.ticket_id,
        "description": task.description,
        "responsible_name": task.responsible,
        "created_at": task.created_at,
    }
    checklist = [
        {"label": entry.label, "is_checked": bool(entry.checked)}
        for entry in task.checklist
    ]
    return root, {"checklist": checklist}


def decode_task(rows: AggregateRows) -> TaskAggregate:
    task = rows.root
    return TaskAggregate(
        id=task.id,
        title=task.title,
        sector=task.sector,
        ticket_id=task.ticket_id,
        description=task.description,
        responsible=task.responsible_name,
        created_at=to_epoch_ms(task.created_at, field="createdAt"),
        checklist=[
            TaskChecklistEntry(
                id=child_id(item.id),
                label=item.label,
                checked=to_bool(item.is_checked),
            )
            for item in rows.rows("checklist")
        ],
    )


# ══════════════════════════════════════════════════════════════════════════
# Round logs
# ══════════════════════════════════════════════════════════════════════════


def encode_round(log: RoundLogAggregate) -> Tuple[RootRow, ChildRows]:
    """The checklist snapshot is frozen into JSON text here."""
    root = {
        "id": log.id,
        "task_id": log.task_id,
        "task_title": log.task_title,
        "sector": log.sector,
        "ticket_id": log.ticket_id,
        "responsible_name": log.responsible,
        "start_time": log.start_time,
        "end_time": log.end_time,
        "duration_seconds": log.duration_seconds,
        "observations": log.observations,
        "issues_detected": bool(log.issues_detected),
        "ai_analysis": log.ai_analysis,
        "signature_base64": log.signature,
        "validation_token": log.validation_token,
        "checklist_snapshot": encode_json(log.checklist_state),
    }
    photos = [{"photo_base64": photo} for photo in log.photos]
    return root, {"photos": photos}


def decode_round(rows: AggregateRows) -> RoundLogAggregate:
    log = rows.root
    snapshot = decode_json(log.checklist_snapshot)
    return RoundLogAggregate(
        id=log.id,
        task_id=log.task_id,
        task_title=log.task_title,
        sector=log.sector,
        ticket_id=log.ticket_id,
        responsible=log.responsible_name,
        start_time=to_epoch_ms(log.start_time, field="startTime"),
        end_time=to_epoch_ms(log.end_time, field="endTime"),
        duration_seconds=to_int(log.duration_seconds, field="durationSeconds"),
        observations=log.observations,
        issues_detected=bool(to_bool(log.issues_detected)),
        ai_analysis=log.ai_analysis,
        signature=log.signature_base64,
        validation_token=log.validation_token,
        checklist_state=snapshot,
        photos=[photo.photo_base64 for photo in rows.rows("photos")],
    )


# ══════════════════════════════════════════════════════════════════════════
# System settings
# ══════════════════════════════════════════════════════════════════════════


def encode_settings(payload: SystemSettingsPayload) -> RootRow:
    return {
        "id": SETTINGS_ROW_ID,
        "company_name": payload.company_name,
        "header_color": payload.header_color,
        "logo_base64": payload.logo,
    }


def decode_settings(row: Optional[Any]) -> SystemSettingsPayload:
    """Absent singleton row → the fixed RondaGuard defaults."""
    if row is None:
        return DEFAULT_SETTINGS.model_copy()
    return SystemSettingsPayload(
        company_name=row.company_name,
        header_color=row.header_color,
        logo=row.logo_base64,
    )
