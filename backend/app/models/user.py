from sqlalchemy import Boolean, Column, Text
from sqlalchemy.orm import relationship
from app.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Text, primary_key=True)
    role = Column(Text, nullable=False)
    full_name = Column(Text)
    email_address = Column(Text)
    mobile_number = Column(Text)
    bio = Column(Text)
    profile_picture_url = Column(Text)
    passing_batch = Column(Text)
    github = Column(Text)
    linked_in = Column(Text)
    is_deleted = Column(Boolean, nullable=False, default=False)
    created_at = Column(Text, nullable=False)

    jobs = relationship("Job", back_populates="owner")
    applications = relationship("JobApplication", back_populates="applicant")
