"""collector — paginated REST data collection for social-science research."""

from collector.pagination import AccumulatedResult, paginate

__all__ = ["paginate", "AccumulatedResult"]
