"""Business logic services."""

from court_rotation.services.fairness_selector import FairnessSelector
from court_rotation.services.skill_grouper import SkillGrouper
from court_rotation.services.team_splitter import TeammateHistory, TeamSplit, TeamSplitter
from court_rotation.services.round_orchestrator import RoundOrchestrator
from court_rotation.services.session_manager import RotationSession, SessionManager

__all__ = [
    "FairnessSelector",
    "SkillGrouper",
    "TeammateHistory",
    "TeamSplit",
    "TeamSplitter",
    "RoundOrchestrator",
    "RotationSession",
    "SessionManager",
]
