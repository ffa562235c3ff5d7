from __future__ import annotations

import re
from typing import Any, Dict, Optional, Tuple, Type

from sqlalchemy.orm import Session


def get_or_create(
    session: Session, model: Type[Any], defaults: Optional[Dict[str, Any]] = None, **kwargs: Any
) -> Tuple[Any, bool]:
    instance = session.query(model).filter_by(**kwargs).first()
    if instance:
        return instance, False

    params = {**kwargs, **(defaults or {})}
    instance = model(**params)
    session.add(instance)
    session.flush()
    return instance, True


def instructor_userid(name: str) -> str:
    """"Dr. Angela Yu" -> "instr_drangelayu"."""
    slug = re.sub(r"[^a-z0-9]+", "", name.lower())
    slug = re.sub(r"^\d+", "", slug)
    return f"instr_{slug or 'instructor'}"
