"""
StudioTone Interactive Preview

Debounced, sequence-numbered re-rendering of an enhancement session.
"""

from .models import OrchestratorState, RenderRequest
from .orchestrator import FilterChainOrchestrator

__all__ = [
    'OrchestratorState',
    'RenderRequest',
    'FilterChainOrchestrator',
]
