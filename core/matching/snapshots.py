"""ORM -> scorer snapshot mapping and public candidate summaries."""

from typing import Any, Dict

from core.scorer.models import SkillEntry, UserSnapshot, WorkingStyleVector
from database.models import User


def snapshot_from_user(user: User) -> UserSnapshot:
    working_style = None
    if user.working_style is not None:
        working_style = WorkingStyleVector(
            scores=user.working_style.scores,
            confidence=float(user.working_style.confidence),
        )

    return UserSnapshot(
        id=str(user.id),
        skills=[
            SkillEntry(
                name=us.skill.name,
                category=us.skill.category,
                proficiency=us.proficiency,
                verified=bool(us.is_verified),
            )
            for us in user.skills
        ],
        roles_looking_for=list(user.roles_looking_for or []),
        industries=list(user.industries or []),
        location=user.location,
        timezone=user.timezone,
        is_remote=bool(user.is_remote),
        availability=user.availability,
        working_style=working_style,
    )


def candidate_summary(user: User) -> Dict[str, Any]:
    """Profile fields shown to the other side of a match. Working-style scores stay private."""
    return {
        'id': str(user.id),
        'first_name': user.first_name,
        'last_name': user.last_name,
        'display_name': user.display_name,
        'avatar_url': user.avatar_url,
        'bio': user.bio,
        'location': user.location,
        'availability': user.availability,
        'is_remote': bool(user.is_remote),
        'industries': list(user.industries or []),
        'skills': [
            {
                'name': us.skill.name,
                'category': us.skill.category,
                'proficiency': us.proficiency,
                'is_verified': bool(us.is_verified),
            }
            for us in user.skills
        ],
        'has_working_style': user.working_style is not None,
    }


def display_name(user: User) -> str:
    if user.display_name:
        return user.display_name
    full = " ".join(part for part in (user.first_name, user.last_name) if part)
    return full or "your match"
