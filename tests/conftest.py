import json

import pytest


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Start every test without Stripe or site configuration."""
    monkeypatch.delenv("STRIPE_SECRET_KEY", raising=False)
    monkeypatch.delenv("URL", raising=False)


@pytest.fixture
def configured_env(monkeypatch):
    monkeypatch.setenv("STRIPE_SECRET_KEY", "sk_test_123")
    monkeypatch.setenv("URL", "https://shop.example")


@pytest.fixture
def make_event():
    """Build a Netlify / API Gateway REST style event."""
    def _make(body=None, method="POST", headers=None, **extra):
        event = {
            "httpMethod": method,
            "headers": headers if headers is not None else {"host": "fn.example"},
            "body": body if body is None or isinstance(body, str) else json.dumps(body),
        }
        event.update(extra)
        return event
    return _make
