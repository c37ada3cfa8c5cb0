"""Options for one orchestration run."""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

from finsync.domain.shared.exceptions import ValidationError
from finsync.domain.sync.exceptions import InvalidCheckpointPolicyError
from finsync.domain.sync.value_objects import CheckpointMode


@dataclass(frozen=True)
class OrchestrationOptions:
    """How start dates are chosen and what is passed through to the endpoint.

    ``today`` pins the calendar day for the whole run; leave it None in
    production.
    """

    mode: CheckpointMode = CheckpointMode.CATCH_UP
    days_back: Optional[int] = None
    endpoint_options: dict[str, Any] = field(default_factory=dict)
    today: Optional[date] = None
    vendor_delay: bool = True

    def validate(self) -> None:
        if self.mode is CheckpointMode.FIXED_LOOKBACK and self.days_back is None:
            msg = "days_back is required for a fixed lookback run"
            raise ValidationError(msg)
        if self.days_back is not None and self.days_back < 0:
            raise InvalidCheckpointPolicyError("days_back", self.days_back)
        if self.mode is CheckpointMode.RETRY_ORIGINAL:
            msg = "Retrying from the original date needs a previous report"
            raise ValidationError(msg)
