"""Application services shared by the sync commands."""

from finsync.application.services.cancellation import CancellationToken
from finsync.application.services.notification_channel import (
    DEFAULT_BUFFER_SIZE,
    NotificationChannel,
    NotificationObserver,
    Subscription,
)
from finsync.application.services.result_aggregator import ResultAggregator

__all__ = [
    "DEFAULT_BUFFER_SIZE",
    "CancellationToken",
    "NotificationChannel",
    "NotificationObserver",
    "ResultAggregator",
    "Subscription",
]
