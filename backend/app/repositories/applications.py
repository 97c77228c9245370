import logging
import uuid

from sqlalchemy import literal_column
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from app.database import store_errors
from app.errors import ConflictError, StoreFailureError
from app.models.application import JobApplication
from app.models.user import User

logger = logging.getLogger(__name__)

APPLICATION_ROWID = literal_column("job_applications.rowid")


class ApplicationRepository:
    def __init__(self, db: Session):
        self.db = db

    def find(self, user_id: str, job_id: str) -> JobApplication | None:
        with store_errors(self.db, "load application"):
            return (
                self.db.query(JobApplication)
                .filter(JobApplication.user_id == user_id, JobApplication.job_id == job_id)
                .first()
            )

    def create(self, user_id: str, job_id: str, applied_at: str) -> JobApplication:
        """Insert an application; the (user_id, job_id) unique index is authoritative."""
        application = JobApplication(
            id=str(uuid.uuid4()),
            user_id=user_id,
            job_id=job_id,
            applied_at=applied_at,
        )
        self.db.add(application)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            logger.warning(
                "Duplicate application rejected by store: user=%s job=%s", user_id, job_id
            )
            raise ConflictError("You have already applied for this job") from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Store failure while trying to create application: %s", exc)
            raise StoreFailureError("Failed to create application") from exc
        self.db.refresh(application)
        return application

    def delete(self, application: JobApplication) -> None:
        with store_errors(self.db, "delete application"):
            self.db.delete(application)
            self.db.commit()

    def list_for_job(self, job_id: str, live_applicants_only: bool = False) -> list[JobApplication]:
        q = (
            self.db.query(JobApplication)
            .options(joinedload(JobApplication.applicant), joinedload(JobApplication.job))
            .filter(JobApplication.job_id == job_id)
        )
        if live_applicants_only:
            q = q.join(User, User.id == JobApplication.user_id).filter(User.is_deleted.is_(False))
        with store_errors(self.db, "fetch applications"):
            return q.order_by(JobApplication.applied_at.desc(), APPLICATION_ROWID.desc()).all()
