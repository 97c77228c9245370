from sqlalchemy import Boolean, Column, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship
from app.database import Base


class Job(Base):
    __tablename__ = "jobs"

    id = Column(Text, primary_key=True)
    owner_id = Column(Text, ForeignKey("users.id"), nullable=False)
    job_title = Column(Text, nullable=False)
    job_description = Column(Text, nullable=False)
    designation = Column(Text, nullable=False)
    location = Column(Text, nullable=False)
    mode = Column(Text, nullable=False)
    experience = Column(Text, nullable=False)
    salary = Column(Text, nullable=False)
    vacancy = Column(Integer, nullable=False)
    joining_date = Column(Text, nullable=False)
    open_till = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default="OPEN")
    is_deleted = Column(Boolean, nullable=False, default=False)
    archived_description = Column(Text)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)

    owner = relationship("User", back_populates="jobs")
    applications = relationship("JobApplication", back_populates="job")
