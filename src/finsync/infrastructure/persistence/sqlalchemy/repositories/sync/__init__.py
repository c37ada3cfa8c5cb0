"""Read-side adapters used by the sync orchestrator."""

from finsync.infrastructure.persistence.sqlalchemy.repositories.sync.account_directory_sqlalchemy import (  # NOQA: E501
    AccountDirectorySQLAlchemy,
)
from finsync.infrastructure.persistence.sqlalchemy.repositories.sync.transaction_date_lookup_sqlalchemy import (  # NOQA: E501
    TransactionDateLookupSQLAlchemy,
)

__all__ = ["AccountDirectorySQLAlchemy", "TransactionDateLookupSQLAlchemy"]
