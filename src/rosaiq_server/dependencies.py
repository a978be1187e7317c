"""
FastAPI dependencies for database sessions, authentication and services.

Two independent guard chains live here: the dashboard session chain
(``get_current_user`` / ``require_admin`` / ``get_accessible_device``) and the
machine chain (``require_api_key``). Routes compose whichever applies.
"""
import hmac
from typing import Optional

from fastapi import Depends, Header
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .config import settings
from .database import get_db
from .errors import UnauthorizedError
from .models.device import Device
from .models.user import User
from .services.access import authorize_device, require_admin_role
from .services.auth_service import decode_access_token
from .services.config_store import ConfigStore
from .services.firmware_registry import FirmwareRegistry
from .services.firmware_storage import FirmwareStorage
from .services.ingest import MeasurementIngest
from .services.registry import DeviceRegistry
from .services.retention import RetentionSweeper

# Security scheme for JWT bearer token
security = HTTPBearer(auto_error=False)

_sweeper = RetentionSweeper(
    measurement_days=settings.RETENTION_MEASUREMENT_DAYS,
    event_days=settings.RETENTION_EVENT_DAYS,
)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """
    Get the current authenticated user from JWT token.

    Raises:
        UnauthorizedError: token missing, invalid or pointing at a deleted user
    """
    if credentials is None:
        raise UnauthorizedError("Not authenticated")

    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise UnauthorizedError("Could not validate credentials")

    # Extract user ID from token
    subject = payload.get("sub")
    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        raise UnauthorizedError("Could not validate credentials")

    user = db.get(User, user_id)
    if user is None:
        raise UnauthorizedError("Could not validate credentials")
    return user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    return require_admin_role(current_user)


def require_api_key(x_api_key: Optional[str] = Header(None, alias="X-API-Key")) -> None:
    """Shared-secret check for device traffic; a no-op unless enabled."""
    if not settings.API_AUTH_ENABLED:
        return
    if not x_api_key or not hmac.compare_digest(x_api_key, settings.API_KEY or ""):
        raise UnauthorizedError("Invalid or missing API key")


def get_registry(db: Session = Depends(get_db)) -> DeviceRegistry:
    return DeviceRegistry(db, settings.device_id_prefixes)


def get_config_store(db: Session = Depends(get_db)) -> ConfigStore:
    return ConfigStore(db, settings.device_defaults())


def get_ingest(
    db: Session = Depends(get_db),
    registry: DeviceRegistry = Depends(get_registry),
) -> MeasurementIngest:
    return MeasurementIngest(db, registry)


def get_firmware_registry(db: Session = Depends(get_db)) -> FirmwareRegistry:
    return FirmwareRegistry(db)


def get_firmware_storage() -> FirmwareStorage:
    return FirmwareStorage(
        settings.FIRMWARE_DIR,
        max_bytes=settings.firmware_max_bytes,
        allowed_extensions=settings.firmware_extensions,
    )


def get_sweeper() -> RetentionSweeper:
    return _sweeper


def get_accessible_device(
    device_id: str,
    current_user: User = Depends(get_current_user),
    registry: DeviceRegistry = Depends(get_registry),
) -> Device:
    """Resolve ``device_id`` and check the caller is admin or owner."""
    device = registry.require(device_id)
    return authorize_device(current_user, device)
