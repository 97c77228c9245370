import logging
from datetime import datetime
from typing import Callable

from sqlalchemy.orm import Session

from app.errors import ConflictError, ExpiredError, ForbiddenError, NotFoundError
from app.identity import Role, require_role
from app.models.application import JobApplication
from app.models.job import Job
from app.repositories.applications import ApplicationRepository
from app.repositories.jobs import JobRepository
from app.repositories.users import UserRepository
from app.schemas.application import (
    ApplicationListResponse,
    ApplicationResponse,
    ApplyResponse,
    JobSummary,
)
from app.services.job_service import applicant_profile
from app.utils.dates import format_ts, parse_ts, utc_now

logger = logging.getLogger(__name__)


def job_summary(job: Job) -> JobSummary:
    return JobSummary(
        id=job.id,
        job_title=job.job_title,
        designation=job.designation,
        location=job.location,
        salary=job.salary,
        status=job.status,
    )


def _application_to_response(application: JobApplication, with_applicant: bool = False) -> ApplicationResponse:
    return ApplicationResponse(
        id=application.id,
        job_id=application.job_id,
        applicant_id=application.user_id,
        applied_at=application.applied_at,
        job=job_summary(application.job),
        applicant=applicant_profile(application.applicant) if with_applicant else None,
    )


class ApplicationService:
    """Apply / withdraw / list. States per (student, job): absent or applied."""

    def __init__(self, db: Session, clock: Callable[[], datetime] = utc_now):
        self.db = db
        self.clock = clock
        self.applications = ApplicationRepository(db)
        self.jobs = JobRepository(db)
        self.users = UserRepository(db)

    def apply(self, student_id: str, job_id: str, role=Role.STUDENT) -> ApplyResponse:
        require_role(role, (Role.STUDENT,), "Only students can apply for jobs")
        student = self.users.get_live(student_id)
        if student is None or student.role != Role.STUDENT.value:
            raise ForbiddenError("Complete your student profile before applying for jobs")

        job = self.jobs.get_live(job_id)
        if job is None:
            raise NotFoundError("Job not found or has been deleted")
        if job.status != "OPEN":
            raise ConflictError("Job is not currently open for applications")
        now = self.clock()
        if now > parse_ts(job.open_till):
            raise ExpiredError("Application deadline has passed")

        # Fast path only; the unique index decides concurrent races.
        if self.applications.find(student_id, job_id) is not None:
            raise ConflictError("You have already applied for this job")

        application = self.applications.create(student_id, job_id, format_ts(now))
        logger.info("Student %s applied to job %s", student_id, job_id)
        return ApplyResponse(application=_application_to_response(application))

    def withdraw(self, student_id: str, job_id: str, role=Role.STUDENT) -> None:
        # No job-status check: withdrawing from a closed or deleted job is allowed.
        require_role(role, (Role.STUDENT,), "Only students can withdraw job applications")
        application = self.applications.find(student_id, job_id)
        if application is None:
            raise NotFoundError("Application not found")
        self.applications.delete(application)
        logger.info("Student %s withdrew from job %s", student_id, job_id)

    def list_applications_for_job(self, job_id: str) -> ApplicationListResponse:
        """Every application for the job, newest first. No authorization here."""
        applications = self.applications.list_for_job(job_id)
        return ApplicationListResponse(
            applications=[_application_to_response(a, with_applicant=True) for a in applications],
            total=len(applications),
        )

    def list_applications_for_owner(self, owner_id: str, owner_role, job_id: str) -> ApplicationListResponse:
        require_role(owner_role, (Role.ALUMNI,), "Only alumni can view job applications")
        if self.jobs.get_live_owned(job_id, owner_id) is None:
            raise NotFoundError("Job not found or you don't have permission to view applications")
        return self.list_applications_for_job(job_id)
