"""
Presentation of collection results as Prometheus metrics.
"""

from .rate_limiter import TokenBucket
from .renderer import (
    CONTENT_TYPE_LATEST,
    PodNetstatCollector,
    render_collection,
    render_error,
    render_metrics,
)

__all__ = [
    "TokenBucket",
    "CONTENT_TYPE_LATEST",
    "PodNetstatCollector",
    "render_collection",
    "render_error",
    "render_metrics",
]
