"""
Reconciliation of expired delete/archive intents.

Provides:
- Sweeper: periodic drain-then-commit of expired intents
- SweepReport: per-tick outcome
- RETENTION_WINDOW / SWEEP_PERIOD
"""

from .models import RETENTION_WINDOW, SWEEP_PERIOD, SweepReport
from .sweeper import Sweeper

__all__ = [
    "RETENTION_WINDOW",
    "SWEEP_PERIOD",
    "SweepReport",
    "Sweeper",
]
