from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_identity
from app.identity import Identity
from app.schemas.job import (
    JobCreate,
    JobDeleteResponse,
    JobDetailResponse,
    JobListResponse,
    JobResponse,
    JobUpdate,
    MyJobListResponse,
)
from app.services.job_service import JobService

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.get("", response_model=JobListResponse)
async def list_jobs(request: Request, db: Session = Depends(get_db)):
    # Filters arrive as free-form query parameters; JobService validates them.
    return JobService(db).list_jobs(dict(request.query_params))


@router.get("/my", response_model=MyJobListResponse)
async def list_my_jobs(
    request: Request,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    return JobService(db).list_my_jobs(identity.user_id, identity.role, dict(request.query_params))


@router.get("/{job_id}", response_model=JobDetailResponse)
async def get_job(
    job_id: str,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    return JobService(db).get_job_by_id(job_id, viewer=identity)


@router.post("", response_model=JobResponse, status_code=201)
async def create_job(
    req: JobCreate,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    return JobService(db).create_job(req, identity.user_id, identity.role)


@router.put("/{job_id}", response_model=JobResponse)
async def update_job(
    job_id: str,
    req: JobUpdate,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    return JobService(db).update_job(job_id, identity.user_id, req, owner_role=identity.role)


@router.delete("/{job_id}", response_model=JobDeleteResponse)
async def delete_job(
    job_id: str,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    return JobService(db).delete_job(job_id, identity.user_id, owner_role=identity.role)
