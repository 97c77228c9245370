from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_identity
from app.identity import Identity
from app.schemas.application import ApplicationListResponse, ApplyResponse
from app.services.application_service import ApplicationService

router = APIRouter(prefix="/applications", tags=["applications"])


@router.get("/{job_id}", response_model=ApplicationListResponse)
async def list_applications(
    job_id: str,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    return ApplicationService(db).list_applications_for_owner(identity.user_id, identity.role, job_id)


@router.post("/{job_id}", response_model=ApplyResponse, status_code=201)
async def apply_for_job(
    job_id: str,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    return ApplicationService(db).apply(identity.user_id, job_id, role=identity.role)


@router.delete("/{job_id}")
async def withdraw_application(
    job_id: str,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    ApplicationService(db).withdraw(identity.user_id, job_id, role=identity.role)
    return {"message": "Application deleted successfully"}
