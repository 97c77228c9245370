from pathlib import Path
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    data_dir: Path = Path.home() / "AlumniJobBoard"
    api_prefix: str = "/api/v1"
    # Listing limits; callers asking for more than max_page_size get a 400.
    default_page_size: int = 10
    max_page_size: int = 100
    # Soft-deleted jobs keep this prefix + id in job_description.
    deleted_job_marker: str = "DELETED_JOB_"
    log_level: str = "INFO"

    @property
    def db_path(self) -> Path:
        return self.data_dir / "jobboard.sqlite"

    model_config = {"env_prefix": "JOBBOARD_"}


settings = Settings()
