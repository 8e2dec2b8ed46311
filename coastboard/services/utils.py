from enum import Enum
from typing import Any, Dict, Iterable, List

from pydantic import BaseModel


def column_values(model: BaseModel, exclude_unset: bool = False) -> Dict[str, Any]:
    """Dump a pydantic model into plain column values (enums as their value)."""
    values = model.model_dump(exclude_unset=exclude_unset)
    for key, value in values.items():
        if isinstance(value, Enum):
            values[key] = value.value
    return values


def unique_ids(ids: Iterable[int]) -> List[int]:
    return list(dict.fromkeys(ids))


def total_pages(total: int, limit: int) -> int:
    return (total + limit - 1) // limit
