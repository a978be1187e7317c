"""
Access control for dashboard users.

Every device-scoped read or write passes ``is_admin(user) or owns(user.id, device)``.
Machine traffic is gated separately by the API key guard and never reaches here.
"""
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import update
from sqlalchemy.orm import Query, Session

from ..errors import AlreadyOwnedError, ForbiddenError, InvalidInputError, NotFoundError
from ..models.device import Device
from ..models.event import (
    EVENT_DEVICE_ASSIGNED,
    EVENT_DEVICE_CLAIMED,
    EVENT_DEVICE_UNASSIGNED,
)
from ..models.user import ROLE_ADMIN, User
from .events import append_event

LOGGER = logging.getLogger(__name__)


def is_admin(user: Optional[User]) -> bool:
    return user is not None and user.role == ROLE_ADMIN


def owns(user_id: Optional[int], device: Device) -> bool:
    return user_id is not None and device.owner_id is not None and device.owner_id == user_id


def authorize_device(user: User, device: Device) -> Device:
    if not (is_admin(user) or owns(user.id, device)):
        raise ForbiddenError(f"You do not have access to device {device.device_id}")
    return device


def require_admin_role(user: User) -> User:
    if not is_admin(user):
        raise ForbiddenError("Admin access required")
    return user


def visible_devices(db: Session, user: User) -> Query:
    """Devices the user may see: all of them for admins, owned ones otherwise."""
    query = db.query(Device)
    if not is_admin(user):
        query = query.filter(Device.owner_id == user.id)
    return query


def claim_device(db: Session, user: User, serial_number: Optional[str]) -> Device:
    """
    Attach an unassigned device to ``user`` by serial number.

    Claiming a device the same user already owns succeeds again.

    Raises:
        InvalidInputError: no serial number given
        NotFoundError: no device with that serial has ever contacted the server
        AlreadyOwnedError: another user owns it
    """
    serial = (serial_number or "").strip()
    if not serial:
        raise InvalidInputError("serial_number is required")

    device = db.query(Device).filter(Device.serial_number == serial).first()
    if device is None:
        raise NotFoundError(f"No device with serial number {serial} has contacted the server")

    result = db.execute(
        update(Device)
        .where(Device.device_id == device.device_id, Device.owner_id.is_(None))
        .values(owner_id=user.id)
    )
    if result.rowcount == 0:
        db.rollback()
        db.refresh(device)
        if device.owner_id != user.id:
            raise AlreadyOwnedError(f"Device {serial} is already claimed by another user")
        return device

    append_event(db, device.device_id, EVENT_DEVICE_CLAIMED, {"user_id": user.id, "username": user.username})
    db.commit()
    db.refresh(device)
    LOGGER.info("Device %s claimed by %s", device.device_id, user.username)
    return device


def assign_device(db: Session, actor: User, device: Device, user_id: int) -> Device:
    """Admin-only: give ``device`` to ``user_id`` regardless of current owner."""
    require_admin_role(actor)
    target = db.get(User, user_id)
    if target is None:
        raise NotFoundError(f"User {user_id} not found")
    previous = device.owner_id
    device.owner_id = target.id
    append_event(
        db,
        device.device_id,
        EVENT_DEVICE_ASSIGNED,
        {"user_id": target.id, "previous_owner_id": previous, "by": actor.username},
    )
    db.commit()
    db.refresh(device)
    LOGGER.info("Device %s assigned to %s by %s", device.device_id, target.username, actor.username)
    return device


def unassign_device(db: Session, actor: User, device: Device) -> Device:
    """Admin-only: return ``device`` to the unassigned pool."""
    require_admin_role(actor)
    previous = device.owner_id
    device.owner_id = None
    append_event(
        db,
        device.device_id,
        EVENT_DEVICE_UNASSIGNED,
        {"previous_owner_id": previous, "by": actor.username},
    )
    db.commit()
    db.refresh(device)
    return device
