from sqlalchemy import Column, Integer, DateTime, ForeignKey, UniqueConstraint, Enum as SQLAEnum
from sqlalchemy.orm import relationship
from datetime import datetime
from student_portal.db.database import Base
import enum


class EnrollmentStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    DROPPED = "DROPPED"
    COMPLETED = "COMPLETED"


class Enrollment(Base):
    __tablename__ = "ENROLLMENTS"

    enrollment_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("USERS.user_id", onupdate="CASCADE", ondelete="CASCADE"), nullable=False)
    course_id = Column(Integer, ForeignKey("COURSES.course_id", onupdate="CASCADE", ondelete="CASCADE"), nullable=False)
    enrolled_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    status = Column(SQLAEnum(EnrollmentStatus, native_enum=False), default=EnrollmentStatus.ACTIVE, nullable=False)

    # The real guard against concurrent duplicate enrollments
    __table_args__ = (UniqueConstraint("user_id", "course_id", name="uq_enrollment_user_course"),)

    user = relationship("User", back_populates="enrollments")
    course = relationship("Course", back_populates="enrollments")
