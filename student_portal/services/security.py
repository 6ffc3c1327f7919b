# Password hashing only; token handling lives in token_service
from passlib.context import CryptContext

from student_portal.core.config import settings

BCRYPT_MAX_BYTES = 72


def _truncate_to_72(password: str) -> str:
    """Ensure password is at most 72 bytes for bcrypt (cut safely by bytes)."""
    if not password:
        return password or ""

    pw_bytes = password.encode("utf-8")
    if len(pw_bytes) > BCRYPT_MAX_BYTES:
        # drop a multi-byte character split by the cut
        password = pw_bytes[:BCRYPT_MAX_BYTES].decode("utf-8", errors="ignore")

    while len(password.encode("utf-8")) > BCRYPT_MAX_BYTES:
        password = password[:-1]

    return password


pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def hash_password(password: str) -> str:
    """Salted bcrypt hash of the (72-byte truncated) password."""
    return pwd_context.hash(_truncate_to_72(password))


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """False on mismatch and on a hash passlib cannot identify."""
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(_truncate_to_72(plain_password), hashed_password)
    except (ValueError, TypeError):
        return False


def dummy_verify() -> None:
    """Burn the same time as a real verify when there is no user to check."""
    pwd_context.dummy_verify()
