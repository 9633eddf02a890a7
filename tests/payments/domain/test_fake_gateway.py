"""Tests for the in-memory payment gateway."""

import json

import pytest

from storefront.payments.gateway.fake_adapter import REQUIRES_PAYMENT_METHOD, FakeGateway
from storefront.shared.errors import InvalidWebhookSignature, PaymentGatewayError


@pytest.fixture()
def fake():
    return FakeGateway(webhook_secret="whsec_unit")


class TestIntents:
    def test_new_intent_awaits_payment(self, fake):
        intent = fake.create_payment_intent(9765, "usd", {"order_id": "ord-1"}, description="Order X")

        assert intent.id.startswith("pi_fake_")
        assert intent.status == REQUIRES_PAYMENT_METHOD
        assert intent.amount == 9765
        assert intent.order_id == "ord-1"
        assert intent.client_secret.startswith(f"{intent.id}_secret_")
        assert fake.calls[0]["description"] == "Order X"

    def test_settling(self, fake):
        intent = fake.create_payment_intent(100, "usd", {"order_id": "ord-1"})

        assert fake.succeed(intent.id).succeeded
        assert fake.retrieve_payment_intent(intent.id).succeeded
        assert not fake.fail(intent.id).succeeded

    def test_unknown_intent(self, fake):
        with pytest.raises(PaymentGatewayError) as exc:
            fake.retrieve_payment_intent("pi_missing")
        assert exc.value.provider_code == "resource_missing"

    def test_declines_when_configured_to_fail(self, fake):
        fake.configure(should_succeed=False, failure_reason="Insufficient funds")

        with pytest.raises(PaymentGatewayError) as exc:
            fake.create_payment_intent(100, "usd", {})
        assert exc.value.message == "Insufficient funds"


class TestRefunds:
    def test_refund_records_amount(self, fake):
        refund = fake.create_refund("pi_1", amount=2000, reason="Damaged")

        assert refund.refund_id.startswith("re_fake_")
        assert refund.amount == 2000
        assert fake.calls[-1] == {
            "method": "create_refund",
            "payment_intent_id": "pi_1",
            "amount": 2000,
            "reason": "Damaged",
        }


class TestWebhooks:
    def test_signed_payload_is_parsed(self, fake):
        intent = fake.create_payment_intent(100, "usd", {"order_id": "ord-1"})
        fake.succeed(intent.id)
        payload = fake.event_payload("payment_intent.succeeded", intent.id)

        event = fake.construct_webhook_event(payload, fake.sign(payload))

        assert event.type == "payment_intent.succeeded"
        assert event.intent.id == intent.id
        assert event.intent.succeeded
        assert event.intent.order_id == "ord-1"

    def test_tampered_payload_is_rejected(self, fake):
        intent = fake.create_payment_intent(100, "usd", {"order_id": "ord-1"})
        payload = fake.event_payload("payment_intent.succeeded", intent.id)
        signature = fake.sign(payload)

        tampered = json.loads(payload)
        tampered["data"]["object"]["amount"] = 1
        with pytest.raises(InvalidWebhookSignature):
            fake.construct_webhook_event(json.dumps(tampered), signature)

    def test_other_secret_is_rejected(self, fake):
        intent = fake.create_payment_intent(100, "usd", {})
        payload = fake.event_payload("payment_intent.succeeded", intent.id)
        foreign = FakeGateway(webhook_secret="whsec_other").sign(payload)

        with pytest.raises(InvalidWebhookSignature):
            fake.construct_webhook_event(payload, foreign)

    @pytest.mark.parametrize("header", ["", "garbage", "t=abc,v1=deadbeef", "v1=deadbeef"])
    def test_malformed_header(self, fake, header):
        with pytest.raises(InvalidWebhookSignature) as exc:
            fake.construct_webhook_event(b"{}", header)
        assert "timestamp" in exc.value.message

    @pytest.mark.parametrize(
        "payload",
        [b"not json", b'{"type": "payment_intent.succeeded"}', b'{"type": "x", "data": {"object": "pi_1"}}', b"[]"],
    )
    def test_signed_but_malformed_body(self, fake, payload):
        with pytest.raises(InvalidWebhookSignature) as exc:
            fake.construct_webhook_event(payload, fake.sign(payload))
        assert exc.value.message.startswith("Invalid payload:")
