"""JSON-valued option storage."""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

from sqlalchemy import select, update

from contentpulse_sync.adapters.sqlalchemy.mappings import option_table

if TYPE_CHECKING:
    from sqlalchemy.orm import Session


class SqlAlchemyOptionStore:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get_option(self, name: str, default: object = None) -> object:
        stmt = select(option_table.c.value).where(option_table.c.name == name)
        row = self.session.execute(stmt).first()
        if row is None:
            return default
        return cast(object, row[0])

    def set_option(self, name: str, value: object) -> None:
        result = self.session.execute(
            update(option_table).where(option_table.c.name == name).values(value=value)
        )
        if result.rowcount == 0:
            self.session.execute(option_table.insert().values(name=name, value=value))
        self.session.flush()


if TYPE_CHECKING:
    from contentpulse_sync.domain.ports.history import OptionStore

    _option_check: OptionStore = SqlAlchemyOptionStore(cast("Session", object()))
