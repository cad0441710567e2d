"""DirectoryEntry ORM model (table participant): one member or visitor record."""

from sqlalchemy import CheckConstraint, ForeignKey, Index, String, Text
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column

from memberdir.domain.enums import EntryStatus
from memberdir.infrastructure.persistence.database import Base
from memberdir.infrastructure.persistence.models._constraints import in_values_check
from memberdir.infrastructure.persistence.models.mixins import MultiTenantModel


class DirectoryEntry(MultiTenantModel, Base):
    """Tenant-scoped directory entry. Only some statuses are searchable."""

    __tablename__ = "participant"

    full_name_th: Mapped[str] = mapped_column(String(255), nullable=False)
    full_name_en: Mapped[str | None] = mapped_column(String(255), nullable=True)
    nickname_th: Mapped[str | None] = mapped_column(String(100), nullable=True)
    nickname_en: Mapped[str | None] = mapped_column(String(100), nullable=True)
    position: Mapped[str | None] = mapped_column(String(255), nullable=True)
    company: Mapped[str | None] = mapped_column(String(255), nullable=True)
    tagline: Mapped[str | None] = mapped_column(Text, nullable=True)
    category_code: Mapped[str | None] = mapped_column(
        String(32),
        ForeignKey("business_categories.category_code", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    tags: Mapped[list[str] | None] = mapped_column(ARRAY(String), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    line_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    line_user_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    photo_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    website_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    onepage_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=EntryStatus.PROSPECT.value
    )

    __table_args__ = (
        CheckConstraint(
            in_values_check("status", EntryStatus.values()),
            name="participant_status_check",
        ),
        Index("ix_participant_tenant_status_name", "tenant_id", "status", "full_name_th"),
        Index("ix_participant_line_user_id", "line_user_id"),
    )
