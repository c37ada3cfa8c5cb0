from finsync.presentation.api.routers.duplicates import router as duplicates_router
from finsync.presentation.api.routers.sync import router as sync_router

__all__ = [
    "duplicates_router",
    "sync_router",
]
