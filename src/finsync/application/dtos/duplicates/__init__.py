"""Duplicate DTOs."""

from finsync.application.dtos.duplicates.duplicate_list_dto import (
    DuplicateListDTO,
    resolution_to_dict,
)

__all__ = ["DuplicateListDTO", "resolution_to_dict"]
