import uuid as uuid_pkg
from datetime import UTC, datetime

from sqlalchemy import DateTime, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, MappedAsDataclass, mapped_column


class UUIDMixin(MappedAsDataclass):
    """Mixin adding a generated UUID primary key named ``id``.

    The UUID is generated client-side with ``uuid4()``, with PostgreSQL's
    ``gen_random_uuid()`` as server-side fallback. It is excluded from the
    dataclass ``__init__`` so callers cannot assign identifiers.
    """

    id: Mapped[uuid_pkg.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid_pkg.uuid4,
        server_default=text("gen_random_uuid()"),
        init=False,
    )


class CreatedAtMixin(MappedAsDataclass):
    """Mixin adding a UTC ``created_at`` timestamp for write-once rows.

    Rows using it are never updated, so there is no ``updated_at``.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default_factory=lambda: datetime.now(UTC),
        nullable=False,
        init=False,
    )
