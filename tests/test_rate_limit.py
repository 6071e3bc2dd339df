import pytest

from conftest import auth_header

from finance_tracker.core.config import Settings
from finance_tracker.core.rate_limit import AUTH_LIMIT_MESSAGE, limiter, rate_limiting_enabled


@pytest.fixture
def limited():
    previous = limiter.enabled
    limiter.enabled = True
    limiter.reset()
    yield limiter
    limiter.enabled = previous
    limiter.reset()


def _register(client, n):
    return client.post(
        "/api/auth/register",
        json={
            "username": f"member{n}",
            "email": f"member{n}@example.com",
            "password": "secret123",
            "name": f"Member {n}",
        },
    )


def test_sixth_registration_attempt_is_throttled(client, limited):
    for n in range(5):
        assert _register(client, n).status_code == 201
    response = _register(client, 5)
    assert response.status_code == 429
    assert response.json() == {"detail": AUTH_LIMIT_MESSAGE}


def test_registration_is_unthrottled_outside_production(client):
    assert not limiter.enabled
    for n in range(7):
        assert _register(client, n).status_code == 201


def test_analytics_limit_applies_per_client(client, user, limited):
    headers = auth_header(user)
    for _ in range(50):
        assert client.get("/api/analytics", headers=headers).status_code == 200
    assert client.get("/api/analytics", headers=headers).status_code == 429


def test_limits_only_apply_in_production():
    assert not rate_limiting_enabled(Settings(ENVIRONMENT="development"))
    assert rate_limiting_enabled(Settings(ENVIRONMENT="production", RATE_LIMIT_DISABLE=False))
    assert not rate_limiting_enabled(Settings(ENVIRONMENT="production", RATE_LIMIT_DISABLE="1"))
