"""Outcome → navigation request mapping.

Performing the navigation belongs to the host; this module only says where.
"""

from __future__ import annotations

from pydantic import BaseModel

from devicegate.domain.decision import Outcome

DEFAULT_BLOCKED_PAGE = "blocked.html"
DEFAULT_NO_SERVICE_PAGE = "noserve.html"


class NavigationRequest(BaseModel):
    """Requested page transition. ``target=None`` means stay on the current page."""

    model_config = {"frozen": True}

    target: str | None = None

    @property
    def navigates(self) -> bool:
        return self.target is not None


def dispatch(
    outcome: Outcome,
    *,
    blocked_page: str = DEFAULT_BLOCKED_PAGE,
    no_service_page: str = DEFAULT_NO_SERVICE_PAGE,
) -> NavigationRequest:
    """Map *outcome* to the page the host should navigate to."""
    if outcome == Outcome.BLOCK:
        return NavigationRequest(target=blocked_page)
    if outcome == Outcome.NO_SERVICE:
        return NavigationRequest(target=no_service_page)
    return NavigationRequest()
