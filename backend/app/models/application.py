from sqlalchemy import Column, ForeignKey, Index, Text
from sqlalchemy.orm import relationship
from app.database import Base


class JobApplication(Base):
    __tablename__ = "job_applications"
    __table_args__ = (
        Index("idx_applications_user_job", "user_id", "job_id", unique=True),
    )

    id = Column(Text, primary_key=True)
    user_id = Column(Text, ForeignKey("users.id"), nullable=False)
    job_id = Column(Text, ForeignKey("jobs.id"), nullable=False)
    applied_at = Column(Text, nullable=False)

    applicant = relationship("User", back_populates="applications")
    job = relationship("Job", back_populates="applications")
