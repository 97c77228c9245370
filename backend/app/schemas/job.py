from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class JobCreate(BaseModel):
    # Loosely typed on purpose: JobService owns validation so that every
    # failure surfaces as a ValidationError with field names.
    job_title: str | None = None
    job_description: str | None = None
    designation: str | None = None
    location: str | None = None
    mode: str | None = None
    experience: str | None = None
    salary: str | None = None
    vacancy: int | str | None = None
    joining_date: str | None = None
    status: str = "OPEN"
    open_till: str | None = None


class JobUpdate(BaseModel):
    job_title: str | None = None
    job_description: str | None = None
    designation: str | None = None
    location: str | None = None
    mode: str | None = None
    experience: str | None = None
    salary: str | None = None
    vacancy: int | str | None = None
    joining_date: str | None = None
    status: str | None = None
    open_till: str | None = None


class OwnerProfile(BaseModel):
    id: str
    role: str
    full_name: str | None
    email_address: str | None
    mobile_number: str | None
    passing_batch: str | None
    bio: str | None
    profile_picture_url: str | None


class ApplicantProfile(BaseModel):
    id: str
    role: str
    full_name: str | None
    email_address: str | None
    mobile_number: str | None
    profile_picture_url: str | None
    github: str | None
    linked_in: str | None


class JobApplicant(BaseModel):
    id: str
    user_id: str
    applied_at: str
    applicant: ApplicantProfile


class JobResponse(BaseModel):
    id: str
    owner_id: str
    job_title: str
    job_description: str
    designation: str
    location: str
    mode: str
    experience: str
    salary: str
    vacancy: int
    joining_date: str
    open_till: str
    status: str
    is_deleted: bool
    created_at: str
    updated_at: str
    accepting_applications: bool
    application_count: int = 0
    owner: OwnerProfile | None = None


class JobDetailResponse(JobResponse):
    has_applied: bool = False
    # None when the viewer may not see who applied.
    applications: list[JobApplicant] | None = None


class PaginationMeta(BaseModel):
    current_page: int
    total_pages: int
    total_count: int
    has_next_page: bool
    has_prev_page: bool

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class JobListResponse(BaseModel):
    jobs: list[JobResponse]
    pagination: PaginationMeta
    filters: dict[str, str | int] = {}


class MyJobListResponse(JobListResponse):
    jobs: list[JobDetailResponse]


class JobDeleteResponse(BaseModel):
    id: str
    message: str
