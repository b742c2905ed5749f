from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from fastapi import Depends, HTTPException
from sqlalchemy.orm import Session

from carwash.db.session import get_db
from carwash.storage.base import Storage
from carwash.storage.sql import SqlStorage


def get_storage(db: Session = Depends(get_db)) -> Storage:
    return SqlStorage(db)


def partial_changes(payload: Any, required: Iterable[str]) -> dict[str, Any]:
    """``exclude_unset`` dump of an update payload; an explicit null on a required column is a 400."""
    changes = payload.model_dump(exclude_unset=True)
    for key in required:
        if key in changes and changes[key] is None:
            raise HTTPException(status_code=400, detail=f"{key} cannot be null")
    return changes
