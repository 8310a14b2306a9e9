"""
Services package for Bluffdict

Contains decomposed service classes that follow Single Responsibility Principle.
"""

from .room_lifecycle_service import RoomLifecycleService
from .word_pool_service import WordPoolService
from .ledger_service import LedgerService
from .scoring_service import ScoringService
from .round_flow_service import RoundFlowService
from .validation_service import ValidationService

__all__ = [
    'RoomLifecycleService',
    'WordPoolService',
    'LedgerService',
    'ScoringService',
    'RoundFlowService',
    'ValidationService'
]
