from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from student_portal.db.database import get_db
from student_portal.schemas.base import ApiResponse
from student_portal.schemas.user_schema import UserData
from student_portal.services.user_service import list_users

# Role check happens in the Authorization Gate (/api/admin is ADMIN-only)
router = APIRouter()


@router.get("/users", response_model=ApiResponse[List[UserData]])
def get_users(db: Session = Depends(get_db)):
    return ApiResponse[List[UserData]](message="Users retrieved successfully", data=list_users(db))
