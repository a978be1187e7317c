from __future__ import annotations

from datetime import timedelta

import pytest

from rosaiq_server.errors import ConflictError, InvalidInputError, UnauthorizedError
from rosaiq_server.models.device import Device
from rosaiq_server.models.user import ROLE_ADMIN, User
from rosaiq_server.services import auth_service
from rosaiq_server.services.access import claim_device


def test_password_hash_round_trip():
    hashed = auth_service.get_password_hash("s3cret-pass")

    assert hashed != "s3cret-pass"
    assert auth_service.verify_password("s3cret-pass", hashed)
    assert not auth_service.verify_password("wrong", hashed)


def test_token_carries_claims_and_expires():
    token = auth_service.create_access_token({"sub": "7"})
    assert auth_service.decode_access_token(token)["sub"] == "7"

    expired = auth_service.create_access_token({"sub": "7"}, expires_delta=timedelta(seconds=-1))
    assert auth_service.decode_access_token(expired) is None
    assert auth_service.decode_access_token("not-a-token") is None


def test_authenticate_stamps_last_login(db_session, standard_user):
    assert standard_user.last_login_at is None

    user = auth_service.authenticate_user(db_session, "alice", "correct-horse-battery")

    assert user.id == standard_user.id
    assert user.last_login_at is not None


def test_authenticate_rejects_bad_credentials(db_session, standard_user):
    with pytest.raises(UnauthorizedError):
        auth_service.authenticate_user(db_session, "alice", "nope")
    with pytest.raises(UnauthorizedError):
        auth_service.authenticate_user(db_session, "nobody", "correct-horse-battery")


def test_duplicate_username_conflicts(db_session, standard_user):
    with pytest.raises(ConflictError):
        auth_service.create_user(db_session, "alice", "another-password")


def test_admin_cannot_delete_self(db_session, admin_user):
    with pytest.raises(InvalidInputError):
        auth_service.delete_user(db_session, admin_user, admin_user.id)


def test_deleting_owner_unassigns_devices(db_session, registry, admin_user, standard_user):
    registry.register_contact("airgradient:own01")
    claim_device(db_session, standard_user, "own01")

    auth_service.delete_user(db_session, admin_user, standard_user.id)

    device = db_session.get(Device, "airgradient:own01", populate_existing=True)
    assert device is not None
    assert device.owner_id is None


def test_update_user_changes_role_and_password(db_session, standard_user):
    auth_service.update_user(db_session, standard_user.id, password="brand-new-pass", role=ROLE_ADMIN)

    user = auth_service.authenticate_user(db_session, "alice", "brand-new-pass")
    assert user.role == ROLE_ADMIN


def test_bootstrap_admin_only_when_no_users(db_session):
    created = auth_service.ensure_admin_account(db_session, "root", "bootstrap-pass")
    assert created is not None and created.role == ROLE_ADMIN

    assert auth_service.ensure_admin_account(db_session, "root2", "bootstrap-pass") is None
    assert auth_service.ensure_admin_account(db_session, None, None) is None
    assert db_session.query(User).count() == 1
