"""
Building blocks for the per-feature validators.

A validator first runs the payload through its pydantic schema, translating
every error into ``field -> message``. It then runs the store-backed checks
(uniqueness, referential existence) on whichever raw values are well typed,
adding to the same map, and raises ValidationFailed once with everything.
"""
from typing import Any, Optional, TypeVar

from pydantic import BaseModel, ValidationError
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ValidationFailed

M = TypeVar("M", bound=BaseModel)


def _field_key(loc: tuple) -> str:
    key = ".".join(str(part) for part in loc)
    if not key or key == "__root__":
        return "root"
    return key


def _message(error: dict) -> str:
    field = str(error["loc"][0]).replace("_", " ") if error.get("loc") else "payload"
    ctx = error.get("ctx") or {}
    kind = error.get("type")

    if kind == "missing":
        return f"The {field} field is required."
    if kind == "string_too_short":
        if ctx.get("min_length") == 1:
            return f"The {field} field is required."
        return f"The {field} must be at least {ctx.get('min_length')} characters."
    if kind == "string_too_long":
        return f"The {field} may not be greater than {ctx.get('max_length')} characters."
    if kind == "string_type" and len(error["loc"]) > 1:
        return f"Each {field} entry must be a string."
    if kind == "string_type":
        return f"The {field} must be a string."
    if kind == "list_type":
        return f"The {field} must be a list."
    if kind == "value_error" and field == "email":
        return "The email must be a valid email address."
    return error["msg"]


def schema_errors(schema: type[M], payload: Any) -> tuple[Optional[M], dict[str, str]]:
    """
    Validate ``payload`` against ``schema``.

    Returns:
        The parsed model (None on failure) and the translated error map.
        Only the first error per field is kept.
    """
    try:
        return schema.model_validate(payload), {}
    except ValidationError as exc:
        errors: dict[str, str] = {}
        for error in exc.errors():
            errors.setdefault(_field_key(error["loc"]), _message(error))
        return None, errors


def raw_string(payload: Any, field: str) -> Optional[str]:
    """Stripped string value of ``field`` when the payload carries one."""
    if not isinstance(payload, dict):
        return None
    value = payload.get(field)
    if not isinstance(value, str) or not value.strip():
        return None
    return value.strip()


def raw_id_list(payload: Any, field: str) -> Optional[list[str]]:
    """The id list under ``field`` when present and made only of strings."""
    if not isinstance(payload, dict) or field not in payload:
        return None
    value = payload[field]
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        return None
    return value


async def check_unique(
    db: AsyncSession,
    errors: dict[str, str],
    model,
    field: str,
    value: Optional[str],
    message: str,
    exclude_id: Optional[str] = None,
    ignore_case: bool = False,
) -> None:
    """Record ``message`` under ``field`` if another row already holds ``value``."""
    if value is None or field in errors:
        return
    column = getattr(model, field)
    if ignore_case:
        stmt = select(model.id).where(func.lower(column) == value.lower())
    else:
        stmt = select(model.id).where(column == value)
    if exclude_id is not None:
        stmt = stmt.where(model.id != exclude_id)
    if await db.scalar(stmt.limit(1)) is not None:
        errors[field] = message


async def resolve_ids(
    db: AsyncSession,
    errors: dict[str, str],
    model,
    field: str,
    ids: Optional[list[str]],
    message: str,
) -> list:
    """
    Load the rows referenced by ``ids``.

    Every id that does not resolve is reported as ``<field>.<index>``.
    Duplicate ids collapse to one row; the result keeps first-seen order.
    """
    if not ids:
        return []
    result = await db.execute(select(model).where(model.id.in_(set(ids))))
    found = {row.id: row for row in result.scalars().all()}

    rows = []
    seen = set()
    for index, item_id in enumerate(ids):
        row = found.get(item_id)
        if row is None:
            errors[f"{field}.{index}"] = message
        elif item_id not in seen:
            seen.add(item_id)
            rows.append(row)
    return rows


def raise_if_errors(errors: dict[str, str]) -> None:
    if errors:
        raise ValidationFailed(errors)
