"""Tenant ORM model. One chapter (organization) whose directory is isolated."""

from sqlalchemy import CheckConstraint, String
from sqlalchemy.orm import Mapped, mapped_column

from memberdir.domain.enums import TenantStatus
from memberdir.infrastructure.persistence.database import Base
from memberdir.infrastructure.persistence.models._constraints import in_values_check
from memberdir.infrastructure.persistence.models.mixins import CuidMixin, TimestampMixin


class Tenant(CuidMixin, TimestampMixin, Base):
    """Root tenant entity. Table: tenant. Status: active, suspended, archived."""

    __tablename__ = "tenant"

    code: Mapped[str] = mapped_column(String, unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=TenantStatus.ACTIVE.value, index=True
    )

    __table_args__ = (
        CheckConstraint(
            in_values_check("status", TenantStatus.values()),
            name="tenant_status_check",
        ),
    )
