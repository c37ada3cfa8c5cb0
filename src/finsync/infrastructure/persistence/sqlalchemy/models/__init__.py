"""SQLAlchemy models for persistence layer."""

from finsync.infrastructure.persistence.sqlalchemy.models.base import (
    Base,
    TimestampMixin,
)
from finsync.infrastructure.persistence.sqlalchemy.models.potential_duplicate_model import (  # NOQA: E501
    PotentialDuplicateModel,
)
from finsync.infrastructure.persistence.sqlalchemy.models.transaction_model import (
    TransactionModel,
)
from finsync.infrastructure.persistence.sqlalchemy.models.vendor_credential_model import (  # NOQA: E501
    VendorCredentialModel,
)

__all__ = [
    "Base",
    "PotentialDuplicateModel",
    "TimestampMixin",
    "TransactionModel",
    "VendorCredentialModel",
]
