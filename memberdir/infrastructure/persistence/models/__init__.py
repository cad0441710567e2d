"""Persistence models: ORM entities and mixins."""

from memberdir.infrastructure.persistence.models.business_category import (
    BusinessCategory,
)
from memberdir.infrastructure.persistence.models.directory_entry import DirectoryEntry
from memberdir.infrastructure.persistence.models.mixins import (
    CuidMixin,
    MultiTenantModel,
    TenantMixin,
    TimestampMixin,
)
from memberdir.infrastructure.persistence.models.tenant import Tenant

__all__ = [
    "Tenant",
    "BusinessCategory",
    "DirectoryEntry",
    "CuidMixin",
    "TenantMixin",
    "TimestampMixin",
    "MultiTenantModel",
]
