import dataclasses
import logging
from datetime import datetime
from typing import Any, Callable, Mapping

from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.config import settings
from app.errors import NotFoundError, ValidationError, ForbiddenError
from app.identity import Identity, Role, require_role
from app.models.job import Job
from app.models.user import User
from app.repositories.applications import ApplicationRepository
from app.repositories.jobs import JobRepository
from app.repositories.users import UserRepository
from app.schemas.job import (
    ApplicantProfile,
    JobApplicant,
    JobDeleteResponse,
    JobDetailResponse,
    JobListResponse,
    JobResponse,
    MyJobListResponse,
    OwnerProfile,
)
from app.services.query_builder import (
    JOB_STATUSES,
    TEXT_FILTER_FIELDS,
    build_job_query,
    build_pagination,
    parse_int,
)
from app.utils.dates import format_ts, parse_iso8601, parse_ts, utc_now

logger = logging.getLogger(__name__)

DATE_FIELDS = ("joining_date", "open_till")
UPDATABLE_FIELDS = TEXT_FILTER_FIELDS + ("vacancy", "status") + DATE_FIELDS
_DATE_LABELS = {"joining_date": "Joining date", "open_till": "Open till date"}


def owner_profile(user: User | None) -> OwnerProfile | None:
    if user is None:
        return None
    return OwnerProfile(
        id=user.id,
        role=user.role,
        full_name=user.full_name,
        email_address=user.email_address,
        mobile_number=user.mobile_number,
        passing_batch=user.passing_batch,
        bio=user.bio,
        profile_picture_url=user.profile_picture_url,
    )


def applicant_profile(user: User) -> ApplicantProfile:
    return ApplicantProfile(
        id=user.id,
        role=user.role,
        full_name=user.full_name,
        email_address=user.email_address,
        mobile_number=user.mobile_number,
        profile_picture_url=user.profile_picture_url,
        github=user.github,
        linked_in=user.linked_in,
    )


def accepting_applications(job: Job, now: datetime) -> bool:
    """Derived at read time; the stored status is never changed by the deadline."""
    return job.status == "OPEN" and now <= parse_ts(job.open_till)


def _job_fields(job: Job, now: datetime, application_count: int) -> dict:
    return dict(
        id=job.id,
        owner_id=job.owner_id,
        job_title=job.job_title,
        job_description=job.job_description,
        designation=job.designation,
        location=job.location,
        mode=job.mode,
        experience=job.experience,
        salary=job.salary,
        vacancy=job.vacancy,
        joining_date=job.joining_date,
        open_till=job.open_till,
        status=job.status,
        is_deleted=job.is_deleted,
        created_at=job.created_at,
        updated_at=job.updated_at,
        accepting_applications=accepting_applications(job, now),
        application_count=application_count,
        owner=owner_profile(job.owner),
    )


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parse_vacancy(value: Any) -> int:
    vacancy = parse_int("vacancy", value)
    if vacancy <= 0:
        raise ValidationError("Vacancy must be a positive number", fields=["vacancy"])
    return vacancy


def _parse_status(value: Any) -> str:
    status = str(value).strip().upper()
    if status not in JOB_STATUSES:
        raise ValidationError(
            f"Invalid status. Must be one of: {', '.join(JOB_STATUSES)}",
            fields=["status"],
        )
    return status


def _parse_future_date(name: str, value: Any, now: datetime) -> str:
    label = _DATE_LABELS[name]
    try:
        parsed = parse_iso8601(value)
    except ValueError:
        raise ValidationError(
            f"Invalid {label.lower()} format. Use ISO 8601 format", fields=[name]
        ) from None
    # Stored at second resolution; compare what will be stored.
    parsed = parsed.replace(microsecond=0)
    if parsed <= now:
        raise ValidationError(f"{label} must be in the future", fields=[name])
    return format_ts(parsed)


def _as_dict(payload: BaseModel | Mapping[str, Any], exclude_unset: bool = False) -> dict:
    if isinstance(payload, BaseModel):
        return payload.model_dump(exclude_unset=exclude_unset)
    return dict(payload)


class JobService:
    """Job create/update/soft-delete and listing, with ownership rules."""

    def __init__(self, db: Session, clock: Callable[[], datetime] = utc_now):
        self.db = db
        self.clock = clock
        self.jobs = JobRepository(db)
        self.applications = ApplicationRepository(db)
        self.users = UserRepository(db)

    # ---- writes ---------------------------------------------------------

    def create_job(self, payload, owner_id: str, owner_role) -> JobResponse:
        require_role(owner_role, (Role.ALUMNI,), "Only alumni can create jobs")
        owner = self.users.get_live(owner_id)
        if owner is None or owner.role != Role.ALUMNI.value:
            raise ForbiddenError("Alumni account not found or deactivated")

        now = self.clock()
        fields = self._validate_new_job(_as_dict(payload), now)
        job = self.jobs.create(owner_id, fields, format_ts(now))
        logger.info("Job %s created by %s", job.id, owner_id)
        return JobResponse(**_job_fields(job, now, 0))

    def update_job(self, job_id: str, owner_id: str, changes, owner_role=Role.ALUMNI) -> JobResponse:
        require_role(owner_role, (Role.ALUMNI,), "Only alumni can update jobs")
        job = self.jobs.get_live_owned(job_id, owner_id)
        if job is None:
            raise NotFoundError("Job not found")

        now = self.clock()
        validated = self._validate_changes(_as_dict(changes, exclude_unset=True), now)
        job = self.jobs.update(job, validated, format_ts(now))
        logger.info("Job %s updated by %s: %s", job.id, owner_id, sorted(validated))
        counts = self.jobs.application_counts([job.id])
        return JobResponse(**_job_fields(job, now, counts.get(job.id, 0)))

    def delete_job(self, job_id: str, owner_id: str, owner_role=Role.ALUMNI) -> JobDeleteResponse:
        require_role(owner_role, (Role.ALUMNI,), "Only alumni can delete jobs")
        job = self.jobs.get_live_owned(job_id, owner_id)
        if job is None:
            raise NotFoundError("Job not found")

        marker = f"{settings.deleted_job_marker}{job.id}"
        self.jobs.soft_delete(job, marker, format_ts(self.clock()))
        logger.info("Job %s soft-deleted by %s", job.id, owner_id)
        return JobDeleteResponse(id=job.id, message="Job marked as deleted")

    # ---- reads ----------------------------------------------------------

    def list_jobs(self, raw_filters: Mapping[str, Any] | None = None) -> JobListResponse:
        query = build_job_query(raw_filters)
        jobs, total = self.jobs.search(query)
        counts = self.jobs.application_counts([j.id for j in jobs])
        now = self.clock()
        return JobListResponse(
            jobs=[JobResponse(**_job_fields(j, now, counts.get(j.id, 0))) for j in jobs],
            pagination=build_pagination(total, query.page, query.limit),
            filters=query.effective_filters(),
        )

    def list_my_jobs(
        self, owner_id: str, owner_role, raw_filters: Mapping[str, Any] | None = None
    ) -> MyJobListResponse:
        require_role(owner_role, (Role.ALUMNI,), "Only alumni can list their jobs")
        query = dataclasses.replace(build_job_query(raw_filters), owner_id=owner_id)
        jobs, total = self.jobs.search(query)
        now = self.clock()
        results = []
        for job in jobs:
            applicants = self._applicants(job.id)
            results.append(
                JobDetailResponse(**_job_fields(job, now, len(applicants)), applications=applicants)
            )
        return MyJobListResponse(
            jobs=results,
            pagination=build_pagination(total, query.page, query.limit),
            filters=query.effective_filters(),
        )

    def get_job_by_id(self, job_id: str, viewer: Identity | None = None) -> JobDetailResponse:
        """Fetch one live job with its owner and live applicants.

        With a viewer, has_applied is filled in and the applicant list is
        withheld unless the viewer owns the job or is an admin.
        """
        job = self.jobs.get_live(job_id)
        if job is None:
            raise NotFoundError("Job not found")

        applicants = self._applicants(job.id)
        detail = JobDetailResponse(
            **_job_fields(job, self.clock(), len(applicants)),
            applications=applicants,
        )
        if viewer is not None:
            detail.has_applied = self.applications.find(viewer.user_id, job.id) is not None
            if viewer.user_id != job.owner_id and viewer.role != Role.ADMIN:
                detail.applications = None
        return detail

    # ---- helpers --------------------------------------------------------

    def _applicants(self, job_id: str) -> list[JobApplicant]:
        return [
            JobApplicant(
                id=a.id,
                user_id=a.user_id,
                applied_at=a.applied_at,
                applicant=applicant_profile(a.applicant),
            )
            for a in self.applications.list_for_job(job_id, live_applicants_only=True)
        ]

    def _validate_new_job(self, data: dict, now: datetime) -> dict:
        required = TEXT_FILTER_FIELDS + ("vacancy",) + DATE_FIELDS
        missing = [name for name in required if _is_blank(data.get(name))]
        if missing:
            raise ValidationError("Missing required fields", fields=missing)

        fields = {name: str(data[name]).strip() for name in TEXT_FILTER_FIELDS}
        fields["vacancy"] = _parse_vacancy(data["vacancy"])
        status = data.get("status")
        fields["status"] = "OPEN" if _is_blank(status) else _parse_status(status)
        for name in DATE_FIELDS:
            fields[name] = _parse_future_date(name, data[name], now)
        return fields

    def _validate_changes(self, changes: dict, now: datetime) -> dict:
        unknown = sorted(set(changes) - set(UPDATABLE_FIELDS))
        if unknown:
            raise ValidationError("Fields cannot be updated", fields=unknown)
        if not changes:
            raise ValidationError("No fields supplied to update")

        validated = {}
        for name, value in changes.items():
            if _is_blank(value):
                raise ValidationError(f"{name} cannot be blank", fields=[name])
            if name in TEXT_FILTER_FIELDS:
                validated[name] = str(value).strip()
            elif name == "vacancy":
                validated[name] = _parse_vacancy(value)
            elif name == "status":
                validated[name] = _parse_status(value)
            else:
                validated[name] = _parse_future_date(name, value, now)
        return validated
