from sqlalchemy.orm import Session

from app.database import store_errors
from app.models.user import User
from app.utils.dates import format_ts, utc_now


class UserRepository:
    """Read access to accounts owned by the account service.

    The core never edits users; add() exists for provisioning and seeding.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_live(self, user_id: str) -> User | None:
        with store_errors(self.db, "load user"):
            return (
                self.db.query(User)
                .filter(User.id == user_id, User.is_deleted.is_(False))
                .first()
            )

    def add(self, user_id: str, role: str, **profile) -> User:
        user = User(
            id=user_id,
            role=role,
            is_deleted=profile.pop("is_deleted", False),
            created_at=format_ts(utc_now()),
            **profile,
        )
        with store_errors(self.db, "create user"):
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
        return user
