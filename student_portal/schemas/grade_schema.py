from datetime import datetime
from typing import Optional

from pydantic import Field, model_validator

from student_portal.models.grade import GradeStatus
from student_portal.schemas.base import CamelModel


class GradeRequest(CamelModel):
    score: float = Field(..., ge=0)
    max_score: float = Field(..., gt=0)
    feedback: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {"score": 85, "maxScore": 100, "feedback": "Good work"}
        }

    @model_validator(mode="after")
    def score_within_max(self):
        if self.score > self.max_score:
            raise ValueError("Score cannot exceed max score")
        return self


class GradeInfo(CamelModel):
    id: int
    submission_id: int
    score: float
    max_score: float
    feedback: Optional[str] = None
    graded_at: Optional[datetime] = None
    status: GradeStatus
