"""SQLAlchemy mapping metadata for the local content store."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    orm,
)
from sqlalchemy.orm import configure_mappers

from contentpulse_sync.domain.model import (
    LifecycleStatus,
    LocalRecord,
    MediaHandle,
    RecordMeta,
    Taxonomy,
    Term,
    UserAccount,
    UserRole,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


def _enum_values(enum_cls: type[LifecycleStatus | Taxonomy | UserRole]) -> list[str]:
    return [member.value for member in enum_cls]


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Content ----------------------------------------------------------------------

user_account_table = Table(
    "user_account",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("login", String, nullable=False, unique=True),
    Column("display_name", String, nullable=False, default=""),
    Column(
        "role",
        Enum(UserRole, name="user_role", values_callable=_enum_values),
        nullable=False,
    ),
)

media_asset_table = Table(
    "media_asset",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("file_name", String, nullable=False),
    Column("file_path", String, nullable=False),
    Column("mime_type", String, nullable=True),
    Column("description", Text, nullable=False, default=""),
    Column("source_url", Text, nullable=True, index=True),
    Column("created_at", UTCDateTime(), nullable=True, default=lambda: datetime.now(UTC)),
)

content_record_table = Table(
    "content_record",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("title", Text, nullable=False, default=""),
    Column("body", Text, nullable=False, default=""),
    Column("excerpt", Text, nullable=False, default=""),
    Column("slug", String, nullable=False, index=True),
    Column(
        "status",
        Enum(LifecycleStatus, name="lifecycle_status", values_callable=_enum_values),
        nullable=False,
    ),
    Column("author_id", Integer, ForeignKey("user_account.id"), nullable=True),
    # Site wall-clock time, stored naive.
    Column("published_local", DateTime(timezone=False), nullable=True),
    Column("published_utc", UTCDateTime(), nullable=True),
    Column("modified_at", UTCDateTime(), nullable=True),
    Column(
        "featured_media_id",
        Integer,
        ForeignKey("media_asset.id", ondelete="SET NULL"),
        nullable=True,
    ),
)

record_meta_table = Table(
    "record_meta",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "record_id",
        Integer,
        ForeignKey("content_record.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("meta_key", String, nullable=False),
    Column("meta_value", Text, nullable=False, default=""),
    UniqueConstraint("record_id", "meta_key"),
    Index("ix_record_meta_key_value", "meta_key", "meta_value"),
)

term_table = Table(
    "term",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "taxonomy",
        Enum(Taxonomy, name="taxonomy", values_callable=_enum_values),
        nullable=False,
    ),
    Column("name", String, nullable=False),
    Column("slug", String, nullable=False),
    UniqueConstraint("taxonomy", "name"),
)

record_term_table = Table(
    "record_term",
    mapper_registry.metadata,
    Column(
        "record_id",
        Integer,
        ForeignKey("content_record.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("term_id", Integer, ForeignKey("term.id", ondelete="CASCADE"), primary_key=True),
)

option_table = Table(
    "option",
    mapper_registry.metadata,
    Column("name", String, primary_key=True),
    Column("value", JSON, nullable=True),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the content model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(UserAccount, user_account_table)
    mapper_registry.map_imperatively(MediaHandle, media_asset_table)
    mapper_registry.map_imperatively(LocalRecord, content_record_table)
    mapper_registry.map_imperatively(
        RecordMeta,
        record_meta_table,
        properties={
            "key": record_meta_table.c.meta_key,
            "value": record_meta_table.c.meta_value,
        },
    )
    mapper_registry.map_imperatively(Term, term_table)

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
