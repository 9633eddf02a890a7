"""Tests for choosing the active payment gateway."""

from dataclasses import replace

import pytest

import storefront.payments.gateway as gateway_module
from storefront.config import get_settings
from storefront.payments.gateway import get_gateway, reset_gateway, set_gateway
from storefront.payments.gateway.fake_adapter import FakeGateway
from storefront.payments.gateway.stripe_adapter import StripeGateway


def _use_settings(monkeypatch, **overrides):
    settings = replace(get_settings(), **overrides)
    monkeypatch.setattr(gateway_module, "get_settings", lambda: settings)


def test_fake_gateway_by_default():
    gateway = get_gateway()

    assert isinstance(gateway, FakeGateway)
    assert get_gateway() is gateway


def test_override_and_reset():
    custom = FakeGateway(webhook_secret="whsec_custom")
    set_gateway(custom)
    assert get_gateway() is custom

    reset_gateway()
    assert get_gateway() is not custom


def test_stripe_gateway_from_settings(monkeypatch):
    _use_settings(monkeypatch, payment_gateway="stripe", stripe_secret_key="sk_test_abc")

    gateway = get_gateway()

    assert isinstance(gateway, StripeGateway)
    assert gateway.api_key == "sk_test_abc"


def test_stripe_gateway_needs_a_secret_key(monkeypatch):
    _use_settings(monkeypatch, payment_gateway="stripe", stripe_secret_key=None)

    with pytest.raises(RuntimeError):
        get_gateway()
