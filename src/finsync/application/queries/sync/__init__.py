"""Sync queries."""

from finsync.application.queries.sync.catch_up_plan_query import CatchUpPlanQuery

__all__ = ["CatchUpPlanQuery"]
