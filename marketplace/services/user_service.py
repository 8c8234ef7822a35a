from sqlalchemy.orm import Session
from marketplace.data.models.user import UserModel
from marketplace.domain.errors import NotFoundError
from marketplace.repos.user_repo import UserRepo
from marketplace.domain.schemas import UserCreate, UserRead


class UserService:
    def __init__(self, db: Session):
        self.repo = UserRepo(db)

    def create_user(self, payload: UserCreate) -> UserRead:
        if payload.id is not None:
            existing = self.repo.get_user(payload.id)
            if existing:
                return UserRead.model_validate(existing)

        user = UserModel(id=payload.id, name=payload.name, email=payload.email)
        created = self.repo.create_user(user)
        return UserRead.model_validate(created)

    def get_user(self, user_id: int) -> UserRead:
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFoundError("user")
        return UserRead.model_validate(user)
