from sqlalchemy import Column, Integer, Float, Text, DateTime, ForeignKey, Enum as SQLAEnum
from sqlalchemy.orm import relationship
from datetime import datetime
from student_portal.db.database import Base
import enum


class GradeStatus(str, enum.Enum):
    PENDING = "PENDING"
    GRADED = "GRADED"


class Grade(Base):
    __tablename__ = "GRADES"

    grade_id = Column(Integer, primary_key=True, autoincrement=True)
    submission_id = Column(Integer, ForeignKey("SUBMISSIONS.submission_id", onupdate="CASCADE", ondelete="CASCADE"), nullable=False)
    score = Column(Float, nullable=False)
    max_score = Column(Float, nullable=False)
    feedback = Column(Text)
    graded_at = Column(DateTime, default=datetime.utcnow, nullable=True)
    status = Column(SQLAEnum(GradeStatus, native_enum=False), default=GradeStatus.GRADED, nullable=False)

    submission = relationship("Submission", back_populates="grades")
