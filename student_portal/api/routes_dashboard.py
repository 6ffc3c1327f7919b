from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from student_portal.db.database import get_db
from student_portal.schemas.base import ApiResponse
from student_portal.schemas.dashboard_schema import DashboardData
from student_portal.schemas.user_schema import CurrentUser
from student_portal.services.auth_gate import get_current_user
from student_portal.services.dashboard_service import get_dashboard_overview

router = APIRouter()


@router.get("/overview", response_model=ApiResponse[DashboardData])
def get_overview(current_user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    data = get_dashboard_overview(db, current_user.id)
    return ApiResponse[DashboardData](message="Dashboard data retrieved successfully", data=data)
