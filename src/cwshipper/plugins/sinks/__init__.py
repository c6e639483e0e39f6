from __future__ import annotations

from .cloudwatch import CloudWatchLogsSink

__all__ = ["CloudWatchLogsSink"]
