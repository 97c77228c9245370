from app.models.user import User
from app.models.job import Job
from app.models.application import JobApplication

__all__ = ["User", "Job", "JobApplication"]
