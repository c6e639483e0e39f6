from __future__ import annotations

from .metrics import MetricsCollector, ShippingMetrics

__all__ = ["MetricsCollector", "ShippingMetrics"]
