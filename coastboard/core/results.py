"""Uniform result envelope returned by every action.

``{"success": True, "data": ...}`` on success,
``{"success": False, "error": "...", "details"?: {field: [messages]}}``
on failure.
"""
import functools
import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from .errors import CoastboardError


def ok(data: Any = None) -> Dict[str, Any]:
    return {"success": True, "data": data}


def fail(error: str, details: Optional[Dict[str, List[str]]] = None) -> Dict[str, Any]:
    result: Dict[str, Any] = {"success": False, "error": error}
    if details:
        result["details"] = details
    return result


def field_errors(exc: ValidationError) -> Dict[str, List[str]]:
    details: Dict[str, List[str]] = {}
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"]) or "__root__"
        details.setdefault(field, []).append(err["msg"])
    return details


def action(failure_message: str):
    """Wrap an async action so that it always returns an envelope.

    The wrapped coroutine returns plain data; errors are translated here:
    domain errors keep their message, validation errors carry per-field
    details, and anything else is logged and reported as ``failure_message``.
    """

    def decorator(fn):
        logger = logging.getLogger(fn.__module__)

        @functools.wraps(fn)
        async def wrapper(*args, **kwargs):
            try:
                data = await fn(*args, **kwargs)
            except CoastboardError as e:
                return fail(str(e))
            except ValidationError as e:
                return fail("Validation failed", field_errors(e))
            except Exception:
                logger.exception("%s", failure_message)
                return fail(failure_message)
            return ok(data)

        return wrapper

    return decorator


def dump(schema, obj) -> Any:
    """Serialize an ORM object (or schema instance) to JSON-ready data."""
    return schema.model_validate(obj).model_dump(mode="json")


def dump_list(schema, items) -> List[Any]:
    return [dump(schema, item) for item in items]
