import uuid

from sqlalchemy import func, literal_column
from sqlalchemy.orm import Session, joinedload

from app.database import store_errors
from app.models.application import JobApplication
from app.models.job import Job
from app.models.user import User
from app.services.query_builder import JobQuery

# Store-assigned insertion sequence, used as the final tie-breaker.
JOB_ROWID = literal_column("jobs.rowid")


class JobRepository:
    """Persistence for Job rows. Soft-deleted rows are invisible to every read."""

    def __init__(self, db: Session):
        self.db = db

    def _live(self):
        return self.db.query(Job).filter(Job.is_deleted.is_(False))

    def get_live(self, job_id: str) -> Job | None:
        with store_errors(self.db, "load job"):
            return (
                self._live()
                .options(joinedload(Job.owner))
                .filter(Job.id == job_id)
                .first()
            )

    def get_live_owned(self, job_id: str, owner_id: str) -> Job | None:
        with store_errors(self.db, "load job"):
            return (
                self._live()
                .options(joinedload(Job.owner))
                .filter(Job.id == job_id, Job.owner_id == owner_id)
                .first()
            )

    def search(self, query: JobQuery) -> tuple[list[Job], int]:
        q = self._live()
        for name, value in query.text.items():
            q = q.filter(getattr(Job, name).icontains(value, autoescape=True))
        if query.vacancy is not None:
            q = q.filter(Job.vacancy == query.vacancy)
        if query.joining_date_from:
            q = q.filter(Job.joining_date >= query.joining_date_from)
        if query.open_till_from:
            q = q.filter(Job.open_till >= query.open_till_from)
        if query.status:
            q = q.filter(Job.status == query.status)
        if query.owner_id:
            q = q.filter(Job.owner_id == query.owner_id)

        sort_column = getattr(Job, query.sort_by)
        ordering = sort_column.asc() if query.sort_order == "asc" else sort_column.desc()

        with store_errors(self.db, "fetch jobs"):
            total = q.count()
            jobs = (
                q.options(joinedload(Job.owner))
                .order_by(ordering, JOB_ROWID.asc())
                .offset(query.skip)
                .limit(query.limit)
                .all()
            )
        return jobs, total

    def create(self, owner_id: str, fields: dict, now: str) -> Job:
        job = Job(
            id=str(uuid.uuid4()),
            owner_id=owner_id,
            is_deleted=False,
            created_at=now,
            updated_at=now,
            **fields,
        )
        with store_errors(self.db, "create job"):
            self.db.add(job)
            self.db.commit()
            self.db.refresh(job)
        return job

    def update(self, job: Job, changes: dict, now: str) -> Job:
        with store_errors(self.db, "update job"):
            for key, value in changes.items():
                setattr(job, key, value)
            job.updated_at = now
            self.db.commit()
            self.db.refresh(job)
        return job

    def soft_delete(self, job: Job, marker: str, now: str) -> Job:
        with store_errors(self.db, "delete job"):
            job.archived_description = job.job_description
            job.job_description = marker
            job.is_deleted = True
            job.updated_at = now
            self.db.commit()
            self.db.refresh(job)
        return job

    def application_counts(self, job_ids: list[str]) -> dict[str, int]:
        """Applications per job, counting only applicants whose account is live."""
        if not job_ids:
            return {}
        with store_errors(self.db, "count applications"):
            rows = (
                self.db.query(JobApplication.job_id, func.count(JobApplication.id))
                .join(User, User.id == JobApplication.user_id)
                .filter(JobApplication.job_id.in_(job_ids), User.is_deleted.is_(False))
                .group_by(JobApplication.job_id)
                .all()
            )
        return {job_id: count for job_id, count in rows}
