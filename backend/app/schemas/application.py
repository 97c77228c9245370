from pydantic import BaseModel

from app.schemas.job import ApplicantProfile


class JobSummary(BaseModel):
    id: str
    job_title: str
    designation: str
    location: str
    salary: str
    status: str


class ApplicationResponse(BaseModel):
    id: str
    job_id: str
    applicant_id: str
    applied_at: str
    job: JobSummary | None = None
    applicant: ApplicantProfile | None = None


class ApplyResponse(BaseModel):
    application: ApplicationResponse


class ApplicationListResponse(BaseModel):
    applications: list[ApplicationResponse]
    total: int
