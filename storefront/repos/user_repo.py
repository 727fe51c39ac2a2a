# storefront/repos/user_repo.py
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.data.models.user import UserModel
from storefront.data.models.profile import ProfileModel


class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: UUID) -> UserModel | None:
        return self.db.get(UserModel, user_id)

    def get_profile_by_email(self, email: str) -> ProfileModel | None:
        return self.db.execute(
            select(ProfileModel).where(ProfileModel.email == email).limit(1)
        ).scalars().first()

    def get_profile_for_user(self, user_id: UUID) -> ProfileModel | None:
        # profiles are linked to auth users by email, not by id
        user = self.get_user(user_id)
        if not user:
            return None
        return self.get_profile_by_email(user.email)
