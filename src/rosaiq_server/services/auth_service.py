"""
Password hashing, JWT issuing and user account management.
"""
import base64
import hashlib
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from jose import JWTError, jwt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..clock import utc_now
from ..config import settings
from ..errors import ConflictError, InvalidInputError, NotFoundError, UnauthorizedError
from ..models.user import ROLE_ADMIN, ROLE_USER, VALID_ROLES, User

LOGGER = logging.getLogger(__name__)

PASSWORD_SCHEME = "pbkdf2_sha256"
PBKDF2_ITERATIONS = 200_000


def _pbkdf2(password: str, salt: bytes, iterations: int) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations, dklen=32)


def get_password_hash(password: str) -> str:
    """Salted PBKDF2 hash stored as ``scheme$iterations$salt$digest``."""
    salt = secrets.token_bytes(16)
    digest = _pbkdf2(password, salt, PBKDF2_ITERATIONS)
    return "$".join(
        (
            PASSWORD_SCHEME,
            str(PBKDF2_ITERATIONS),
            base64.b64encode(salt).decode("ascii"),
            base64.b64encode(digest).decode("ascii"),
        )
    )


def verify_password(plain_password: str, password_hash: str) -> bool:
    try:
        scheme, iterations, salt_b64, digest_b64 = password_hash.split("$")
        salt = base64.b64decode(salt_b64)
        expected = base64.b64decode(digest_b64)
        rounds = int(iterations)
    except ValueError:
        return False
    if scheme != PASSWORD_SCHEME:
        return False
    return secrets.compare_digest(_pbkdf2(plain_password, salt, rounds), expected)


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """Sign ``data`` into a bearer token that expires after ``expires_delta``."""
    to_encode = dict(data)
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode["exp"] = expire
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """Return the token claims, or None if the token is invalid or expired."""
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None


def authenticate_user(db: Session, username: str, password: str) -> User:
    """
    Check credentials and stamp the login time.

    Raises:
        UnauthorizedError: unknown user or wrong password
    """
    user = db.query(User).filter(User.username == username).first()
    if user is None or not verify_password(password, user.password_hash):
        raise UnauthorizedError("Incorrect username or password")
    user.last_login_at = utc_now()
    db.commit()
    db.refresh(user)
    return user


def create_user(db: Session, username: str, password: str, role: str = ROLE_USER) -> User:
    if role not in VALID_ROLES:
        raise InvalidInputError(f"Role must be one of: {', '.join(VALID_ROLES)}")
    user = User(username=username, password_hash=get_password_hash(password), role=role)
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(f"Username {username} is already taken") from exc
    db.refresh(user)
    LOGGER.info("User %s created with role %s", username, role)
    return user


def update_user(db: Session, user_id: int, password: Optional[str] = None, role: Optional[str] = None) -> User:
    user = get_user(db, user_id)
    if role is not None:
        if role not in VALID_ROLES:
            raise InvalidInputError(f"Role must be one of: {', '.join(VALID_ROLES)}")
        user.role = role
    if password is not None:
        user.password_hash = get_password_hash(password)
    db.commit()
    db.refresh(user)
    return user


def delete_user(db: Session, actor: User, user_id: int) -> None:
    """Delete an account. Owned devices fall back to unassigned."""
    if actor.id == user_id:
        raise InvalidInputError("You cannot delete your own account")
    user = get_user(db, user_id)
    db.delete(user)
    db.commit()
    LOGGER.info("User %s deleted by %s", user.username, actor.username)


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError(f"User {user_id} not found")
    return user


def list_users(db: Session) -> List[User]:
    return db.query(User).order_by(User.username).all()


def ensure_admin_account(db: Session, username: Optional[str], password: Optional[str]) -> Optional[User]:
    """Create the bootstrap admin when no account exists yet."""
    if not username or not password:
        return None
    if db.query(User).count() > 0:
        return None
    LOGGER.info("No users found; creating bootstrap admin %s", username)
    return create_user(db, username, password, role=ROLE_ADMIN)
