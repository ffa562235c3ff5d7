from __future__ import annotations

from typing import Any, Iterable, Optional, Sequence

from sqlalchemy import inspect, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import InstrumentedAttribute
from sqlalchemy.orm.properties import ColumnProperty, SynonymProperty

# Dialects with a native INSERT ... ON CONFLICT DO UPDATE.
_NATIVE_UPSERT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def get_model_attribute(model: type, name: str) -> Optional[InstrumentedAttribute]:
    """Return a mapped column/synonym attribute or None if it is not present."""
    try:
        mapper = inspect(model)
    except Exception:
        return None

    prop = mapper.attrs.get(name)
    if not isinstance(prop, (ColumnProperty, SynonymProperty)):
        return None

    return getattr(model, name, None)


def _require_columns(model: type, names: Iterable[str]) -> list[InstrumentedAttribute]:
    attrs = []
    for name in names:
        attr = get_model_attribute(model, name)
        if attr is None:
            raise ValueError(f"{model.__name__} has no column {name!r}")
        attrs.append(attr)
    return attrs


def upsert(
    session: Session,
    model: type,
    values: dict[str, Any],
    conflict_columns: Sequence[str],
    update_columns: Sequence[str],
) -> Any:
    """
    Insert ``values`` or, when a row with the same ``conflict_columns`` exists,
    overwrite only ``update_columns`` on it. Returns the resulting ORM row.

    Runs inside the caller's transaction and does not commit. Dialects without a
    native conflict clause fall back to SELECT ... FOR UPDATE then insert-or-update.
    """
    key_attrs = _require_columns(model, conflict_columns)
    _require_columns(model, update_columns)
    key_filter = [attr == values[attr.key] for attr in key_attrs]

    native_insert = _NATIVE_UPSERT.get(session.get_bind().dialect.name)
    if native_insert is not None:
        stmt = native_insert(model).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=list(conflict_columns),
            set_={name: stmt.excluded[name] for name in update_columns},
        )
        session.execute(stmt)
    else:
        existing = session.execute(
            select(model).where(*key_filter).with_for_update()
        ).scalar_one_or_none()
        if existing is None:
            session.add(model(**values))
        else:
            for name in update_columns:
                setattr(existing, name, values[name])
        session.flush()

    return session.execute(
        select(model).where(*key_filter).execution_options(populate_existing=True)
    ).scalar_one()
