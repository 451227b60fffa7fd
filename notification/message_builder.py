from typing import Any, Optional
from urllib.parse import urljoin

from pydantic import BaseModel


class NotificationType:
    NEW_MATCH = "new_match"
    MATCH_INTEREST = "match_interest"
    MUTUAL_MATCH = "mutual_match"


class NotificationRequest(BaseModel):
    """In-app notification to be recorded for one user."""
    user_id: str
    type: str
    title: str
    content: str
    action_url: Optional[str] = None
    action_text: Optional[str] = None
    match_id: Optional[str] = None
    # Distinguishes repeated events for the same match, e.g. a refreshed suggestion
    cycle: Optional[str] = None


class NotificationMessageBuilder:
    """Builds the user-facing text for match lifecycle events."""

    MATCHES_PATH = "/match"

    def __init__(self, base_url: str = ""):
        self.base_url = base_url or ""

    def _matches_url(self) -> str:
        if not self.base_url:
            return self.MATCHES_PATH
        return urljoin(self.base_url.rstrip('/') + '/', self.MATCHES_PATH.lstrip('/'))

    @staticmethod
    def format_score(score: Any) -> str:
        try:
            return f"{float(score):.0f}"
        except (TypeError, ValueError):
            return "?"

    def new_match(self, user_id: Any, match_id: Any, score: float, cycle: Optional[str] = None) -> NotificationRequest:
        return NotificationRequest(
            user_id=str(user_id),
            type=NotificationType.NEW_MATCH,
            title="New co-founder match",
            content=f"You have a new potential co-founder match with a compatibility score of {self.format_score(score)}.",
            action_url=self._matches_url(),
            action_text="View match",
            match_id=str(match_id),
            cycle=cycle,
        )

    def someone_interested(self, user_id: Any, match_id: Any, cycle: Optional[str] = None) -> NotificationRequest:
        """Anonymous signal: never names the person who expressed interest."""
        return NotificationRequest(
            user_id=str(user_id),
            type=NotificationType.MATCH_INTEREST,
            title="Someone is interested",
            content="One of your suggested matches is interested in building together. Review your matches to respond.",
            action_url=self._matches_url(),
            action_text="Review matches",
            match_id=str(match_id),
            cycle=cycle,
        )

    def mutual_match(self, user_id: Any, match_id: Any, partner_name: Optional[str] = None) -> NotificationRequest:
        partner = partner_name or "your match"
        return NotificationRequest(
            user_id=str(user_id),
            type=NotificationType.MUTUAL_MATCH,
            title="It's a mutual match!",
            content=f"You and {partner} are both interested. Reach out and start the conversation.",
            action_url=self._matches_url(),
            action_text="Say hello",
            match_id=str(match_id),
        )
