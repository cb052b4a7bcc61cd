"""
Application layer for specwright.

Contains the services that orchestrate domain logic over the storage ports.
"""

from specwright.application.phase_service import PhaseTrackingService
from specwright.application.session_service import (
    SCOPING_PROJECT_ID,
    SessionService,
    session_agent_for_workflow,
)

__all__ = [
    "SCOPING_PROJECT_ID",
    "PhaseTrackingService",
    "SessionService",
    "session_agent_for_workflow",
]
