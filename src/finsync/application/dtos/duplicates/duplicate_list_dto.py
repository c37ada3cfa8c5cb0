"""DTO for the duplicate listing query."""

from dataclasses import dataclass

from finsync.domain.duplicates.value_objects import (
    DuplicatePair,
    DuplicateResolution,
    DuplicateStatus,
)


def resolution_to_dict(resolution: DuplicateResolution) -> dict:
    return {
        "transaction1": resolution.first.to_dict(),
        "transaction2": resolution.second.to_dict(),
        "similarity": resolution.similarity,
        "status": resolution.status.value,
        "resolved_action": resolution.resolved_action,
        "resolved_at": (
            resolution.resolved_at.isoformat() if resolution.resolved_at else None
        ),
    }


@dataclass(frozen=True)
class DuplicateListDTO:
    """Freshly detected candidates plus the tracked history."""

    detected: tuple[DuplicatePair, ...]
    tracked: tuple[DuplicateResolution, ...]

    @property
    def pending_count(self) -> int:
        return sum(1 for r in self.tracked if r.status is DuplicateStatus.PENDING)

    @property
    def resolved_count(self) -> int:
        return sum(1 for r in self.tracked if r.is_resolved)

    def to_dict(self) -> dict:
        return {
            "detected": [pair.to_dict() for pair in self.detected],
            "tracked": [resolution_to_dict(r) for r in self.tracked],
            "summary": {
                "detected_count": len(self.detected),
                "pending_count": self.pending_count,
                "resolved_count": self.resolved_count,
            },
        }
