"""
Pending delete/archive intents.

Provides:
- Intent / DrainedBatch models
- IntentStore: mark, undo, recover, drain_expired
"""

from .models import DrainedBatch, Intent
from .store import IntentStore

__all__ = [
    "DrainedBatch",
    "Intent",
    "IntentStore",
]
