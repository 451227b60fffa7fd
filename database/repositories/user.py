import logging
from typing import Any, Collection, List, Optional

from sqlalchemy import select

from database.models import User, Skill, UserSkill
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository):
    def get_by_id(self, user_id: Any) -> Optional[User]:
        stmt = select(User).where(User.id == user_id, User.deleted_at.is_(None))
        return self.db.execute(stmt).scalar_one_or_none()

    def get_eligible_candidates(self, exclude_ids: Collection[Any] = ()) -> List[User]:
        """Users who can appear in someone's candidate pool."""
        stmt = select(User).where(
            User.looking_for_team.is_(True),
            User.is_active.is_(True),
            User.is_banned.is_(False),
            User.deleted_at.is_(None),
            User.onboarding_completed_at.is_not(None),
        )
        if exclude_ids:
            stmt = stmt.where(User.id.not_in(list(exclude_ids)))
        stmt = stmt.order_by(User.id)
        return list(self.db.execute(stmt).scalars().unique().all())

    def get_many(self, user_ids: Collection[Any]) -> List[User]:
        if not user_ids:
            return []
        stmt = select(User).where(User.id.in_(list(user_ids)))
        return list(self.db.execute(stmt).scalars().unique().all())

    def create_user(self, **fields) -> User:
        user = User(**fields)
        self.db.add(user)
        self.db.flush()
        return user

    def get_or_create_skill(self, name: str, category: str) -> Skill:
        stmt = select(Skill).where(Skill.name == name)
        skill = self.db.execute(stmt).scalar_one_or_none()
        if skill is None:
            skill = Skill(name=name, category=category)
            self.db.add(skill)
            self.db.flush()
        return skill

    def add_skill(
        self,
        user: User,
        name: str,
        category: str,
        proficiency: str = 'intermediate',
        is_verified: bool = False
    ) -> UserSkill:
        skill = self.get_or_create_skill(name, category)
        user_skill = UserSkill(user=user, skill=skill, proficiency=proficiency, is_verified=is_verified)
        self.db.add(user_skill)
        self.db.flush()
        return user_skill
