import logging
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from student_portal.core.exceptions import AuthenticationError, ConflictError, NotFoundError
from student_portal.models.user import Role, User
from student_portal.schemas.user_schema import RegisterRequest, UserData
from student_portal.services.security import dummy_verify, hash_password, verify_password
from student_portal.services.token_service import create_access_token

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"
INVALID_CREDENTIALS_DETAIL = "Email or password is incorrect"


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def to_user_data(user: User) -> UserData:
    """Outward-facing view of a user, without the password hash."""
    return UserData(
        id=user.user_id,
        email=user.email,
        name=user.name,
        role=user.role,
        avatar=user.avatar,
        created_at=user.created_at,
    )


# --- Credential store ---

def find_user_by_email(db: Session, email: str) -> Optional[User]:
    """Full row including the hash; only the login check should use this."""
    return db.query(User).filter(User.email == _normalize_email(email)).first()


def find_user_by_id(db: Session, user_id: int) -> Optional[UserData]:
    user = db.query(User).filter(User.user_id == user_id).first()
    if not user:
        return None
    return to_user_data(user)


def get_user_or_404(db: Session, user_id: int) -> UserData:
    user = find_user_by_id(db, user_id)
    if not user:
        raise NotFoundError("User not found", "User account no longer exists")
    return user


def email_exists(db: Session, email: str) -> bool:
    return db.query(User.user_id).filter(User.email == _normalize_email(email)).first() is not None


def create_user(db: Session, email: str, password: str, name: str, role: Role = Role.STUDENT) -> UserData:
    if email_exists(db, email):
        raise ConflictError("Email already registered", "An account with this email already exists")

    new_user = User(
        email=_normalize_email(email),
        name=name.strip(),
        password_hash=hash_password(password),
        role=role,
    )
    db.add(new_user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration for the same email
        db.rollback()
        raise ConflictError("Email already registered", "An account with this email already exists")
    db.refresh(new_user)

    logger.info("Created user %s with role %s", new_user.user_id, new_user.role.value)
    return to_user_data(new_user)


def list_users(db: Session) -> List[UserData]:
    """All users, newest first (admin view)."""
    users = db.query(User).order_by(User.created_at.desc(), User.user_id.desc()).all()
    return [to_user_data(u) for u in users]


# --- Login / register flows ---

def register_user(db: Session, data: RegisterRequest) -> Tuple[UserData, str]:
    user = create_user(db, data.email, data.password, data.name, data.role)
    token = create_access_token(user)
    return user, token


def authenticate_user(db: Session, email: str, password: str) -> Tuple[UserData, str]:
    # Same error for unknown email and wrong password: no user enumeration
    user = find_user_by_email(db, email)
    if not user:
        dummy_verify()
    if not user or not verify_password(password, user.password_hash):
        logger.info("Failed login attempt")
        raise AuthenticationError(INVALID_CREDENTIALS, INVALID_CREDENTIALS_DETAIL)

    user_data = to_user_data(user)
    token = create_access_token(user_data)
    logger.info("User %s logged in", user_data.id)
    return user_data, token
