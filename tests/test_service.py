from datetime import timedelta

import pytest

from autoreport.errors import (
    AlreadyExistsError,
    InvalidCredentialsError,
    TrialExpiredError,
    UnauthorizedError,
)
from autoreport.security import create_access_token, decode_access_token, verify_password

from conftest import T0


def test_register_sets_trial_window(service):
    user = service.register("A", "a@x.com", "pw", now=T0)

    assert user.id is not None
    assert user.email == "a@x.com"
    assert user.trial_start == T0
    assert user.trial_end == T0 + timedelta(days=10)
    assert user.trial_active is True
    assert user.reset_token is None and user.reset_expires is None
    assert user.password_hash != "pw"
    assert verify_password("pw", user.password_hash)


def test_register_normalizes_email(service):
    user = service.register("A", "  A@X.com ", "pw", now=T0)

    assert user.email == "a@x.com"


def test_register_duplicate_email(service):
    service.register("A", "a@x.com", "pw", now=T0)

    with pytest.raises(AlreadyExistsError):
        service.register("B", "a@x.com", "pw2", now=T0)

    with pytest.raises(AlreadyExistsError):
        service.register("C", "A@X.COM", "pw3", now=T0)


def test_unique_violation_from_store_becomes_already_exists(service, store, monkeypatch):
    service.register("A", "a@x.com", "pw", now=T0)
    monkeypatch.setattr(store, "find_by_email", lambda email: None)

    with pytest.raises(AlreadyExistsError):
        service.register("B", "a@x.com", "pw2", now=T0)


def test_login_returns_token_for_user(service, registered):
    token = service.login("ana@autoreport.io", "s3cret-pass", now=T0 + timedelta(hours=1))

    claims = decode_access_token(token, now=T0 + timedelta(hours=2))
    assert claims["sub"] == str(registered.id)
    assert claims["email"] == "ana@autoreport.io"


def test_login_is_case_insensitive_on_email(service, registered):
    assert service.login("ANA@autoreport.io", "s3cret-pass", now=T0)


def test_login_failures_do_not_reveal_which_factor(service, registered):
    with pytest.raises(InvalidCredentialsError) as wrong_password:
        service.login("ana@autoreport.io", "wrongpw", now=T0)

    with pytest.raises(InvalidCredentialsError) as unknown_email:
        service.login("nobody@autoreport.io", "s3cret-pass", now=T0)

    assert wrong_password.value.detail == unknown_email.value.detail


def test_login_after_trial_expiry(service, store, registered):
    assert service.login("ana@autoreport.io", "s3cret-pass", now=T0 + timedelta(days=9))

    with pytest.raises(TrialExpiredError):
        service.login("ana@autoreport.io", "s3cret-pass", now=T0 + timedelta(days=11))

    assert store.get(registered.id).trial_active is False

    # still expired on a later attempt, flag stays down
    with pytest.raises(TrialExpiredError):
        service.login("ana@autoreport.io", "s3cret-pass", now=T0 + timedelta(days=12))
    assert store.get(registered.id).trial_active is False


def test_wrong_password_after_expiry_hides_trial_state(service, store, registered):
    with pytest.raises(InvalidCredentialsError):
        service.login("ana@autoreport.io", "wrongpw", now=T0 + timedelta(days=11))

    assert store.get(registered.id).trial_active is True


def test_authenticate_returns_user_id(service, registered):
    token = service.login("ana@autoreport.io", "s3cret-pass", now=T0)

    assert service.authenticate(token, now=T0 + timedelta(days=1)) == registered.id


def test_authenticate_expired_token(service, registered):
    token = create_access_token({"sub": str(registered.id)}, expires_delta=timedelta(seconds=-1), now=T0)

    with pytest.raises(UnauthorizedError) as exc:
        service.authenticate(token, now=T0)

    assert exc.value.detail == "Token expired"


def test_authenticate_invalid_token(service):
    with pytest.raises(UnauthorizedError) as exc:
        service.authenticate("not.a.token", now=T0)

    assert exc.value.detail == "Invalid token"


def test_authenticate_non_numeric_subject(service):
    token = create_access_token({"sub": "abc"}, now=T0)

    with pytest.raises(UnauthorizedError):
        service.authenticate(token, now=T0)


def test_get_active_user_flips_trial(service, store, registered):
    assert service.get_active_user(registered.id, now=T0 + timedelta(days=9)).id == registered.id

    with pytest.raises(TrialExpiredError):
        service.get_active_user(registered.id, now=T0 + timedelta(days=11))

    assert store.get(registered.id).trial_active is False


def test_get_active_user_unknown(service):
    with pytest.raises(UnauthorizedError):
        service.get_active_user(999, now=T0)
