"""
Partial update helpers shared by the update endpoints.
"""
from typing import Any, Dict

from pydantic import BaseModel


def patch_values(patch: BaseModel) -> Dict[str, Any]:
    """
    Fields the client actually supplied with a non-null value.

    Omitted and null fields are dropped, so an update never clears a column
    by accident.
    """
    return {
        field: value
        for field, value in patch.model_dump(exclude_unset=True).items()
        if value is not None
    }


def apply_patch(instance: Any, values: Dict[str, Any]) -> bool:
    """
    Copy ``values`` onto an ORM instance.

    Returns:
        bool: True if at least one attribute changed
    """
    changed = False
    for field, value in values.items():
        if getattr(instance, field) != value:
            setattr(instance, field, value)
            changed = True
    return changed
