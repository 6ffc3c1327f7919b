from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from student_portal.db.database import get_db
from student_portal.schemas.base import ApiResponse
from student_portal.schemas.user_schema import AuthData, CurrentUser, LoginRequest, RegisterRequest, UserData
from student_portal.services.auth_gate import get_current_user
from student_portal.services.token_service import clear_auth_cookie, set_auth_cookie
from student_portal.services.user_service import authenticate_user, get_user_or_404, register_user

router = APIRouter()


@router.post("/register", response_model=ApiResponse[AuthData])
def register(data: RegisterRequest, response: Response, db: Session = Depends(get_db)):
    user, token = register_user(db, data)
    set_auth_cookie(response, token)

    return ApiResponse[AuthData](
        message="User registered successfully",
        data=AuthData(user=user, token=token),
    )


@router.post("/login", response_model=ApiResponse[AuthData])
def login(data: LoginRequest, response: Response, db: Session = Depends(get_db)):
    user, token = authenticate_user(db, data.email, data.password)
    set_auth_cookie(response, token)

    return ApiResponse[AuthData](
        message="Login successful",
        data=AuthData(user=user, token=token),
    )


@router.post("/logout", response_model=ApiResponse[None])
def logout(response: Response):
    # Stateless sessions: logging out is just dropping the cookie
    clear_auth_cookie(response)
    return ApiResponse[None](message="Logout successful")


@router.get("/me", response_model=ApiResponse[UserData])
def me(current_user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    user = get_user_or_404(db, current_user.id)
    return ApiResponse[UserData](message="User data retrieved successfully", data=user)
