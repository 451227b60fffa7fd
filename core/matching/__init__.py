"""Matching Module - Match lifecycle over mirrored directed rows."""
from core.matching.dto import MatchView, RunResult, RespondResult
from core.matching.service import MatchingService, RESPONSE_ACTIONS
from core.matching.snapshots import snapshot_from_user, candidate_summary

__all__ = [
    'MatchingService', 'RESPONSE_ACTIONS',
    'MatchView', 'RunResult', 'RespondResult',
    'snapshot_from_user', 'candidate_summary',
]
