"""Top performers service package."""

from fightstats.services.top_performers.service import (
    TopPerformersService,
    get_top_performers_service,
)

__all__ = ["TopPerformersService", "get_top_performers_service"]
