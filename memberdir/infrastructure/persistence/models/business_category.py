"""BusinessCategory ORM model. Global reference data (code to localized names)."""

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from memberdir.infrastructure.persistence.database import Base


class BusinessCategory(Base):
    """Business category. Table: business_categories. Not tenant-scoped."""

    __tablename__ = "business_categories"

    category_code: Mapped[str] = mapped_column(String(32), primary_key=True)
    name_th: Mapped[str] = mapped_column(String(255), nullable=False)
    name_en: Mapped[str | None] = mapped_column(String(255), nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
