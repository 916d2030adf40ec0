"""Tests for idempotency payload sanitization and phone masking."""

from collections import OrderedDict

import pytest

from failure_core.redaction import (
    CIRCULAR,
    MASKED_PHONE,
    REDACTED,
    mask_phone_number,
    sanitize_idempotency_payload,
)


class TestMaskPhoneNumber:

    def test_masks_middle_digits(self):
        assert mask_phone_number("+27821234567") == "27*******67"

    def test_strips_formatting(self):
        assert mask_phone_number("(082) 123-4567") == "08******67"

    def test_short_numbers_fully_masked(self):
        assert mask_phone_number("12345") == MASKED_PHONE
        assert mask_phone_number("") == MASKED_PHONE

    def test_minimum_two_asterisks(self):
        assert mask_phone_number("123456") == "12**56"


class TestSanitizeIdempotencyPayload:

    def test_none_stays_none(self):
        assert sanitize_idempotency_payload(None) is None

    def test_redacts_sensitive_keys(self):
        result = sanitize_idempotency_payload({"token": "t", "status": "ok"})
        assert result == {"token": REDACTED, "status": "ok"}

    @pytest.mark.parametrize("key", ["phone", "customerMobile", "msisdn", "contact_number"])
    def test_masks_phone_keys(self, key):
        result = sanitize_idempotency_payload({key: "+27 82 123 4567"})
        assert result == {key: "27*******67"}

    def test_phone_key_with_non_string_value_is_descended(self):
        result = sanitize_idempotency_payload({"contact": {"name": "ada", "secret": "s"}})
        assert result == {"contact": {"name": "ada", "secret": REDACTED}}

    def test_sensitive_key_checked_before_phone_key(self):
        result = sanitize_idempotency_payload({"phone_token": "+27821234567"})
        assert result == {"phone_token": REDACTED}

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("+27821234567", "27*******67"),
            ("0821234567", "08******67"),
            ("1234567", "1234567"),
            ("+1234567890123456", "+1234567890123456"),
            ("order-12345678", "order-12345678"),
        ],
    )
    def test_masks_phone_shaped_strings_anywhere(self, value, expected):
        assert sanitize_idempotency_payload({"items": [value]}) == {"items": [expected]}

    def test_top_level_phone_string(self):
        assert sanitize_idempotency_payload("+27821234567") == "27*******67"

    def test_dict_subclasses_are_descended(self):
        ordered = OrderedDict([("password", "p")])
        result = sanitize_idempotency_payload({"wrapped": ordered})
        assert result == {"wrapped": {"password": REDACTED}}

    def test_plain_objects_pass_through(self):
        class Settings:
            def __init__(self):
                self.password = "p"

        settings = Settings()
        result = sanitize_idempotency_payload({"settings": settings})
        assert result["settings"] is settings

    def test_cycle_safe(self):
        response = {"id": "r1"}
        response["self"] = response
        assert sanitize_idempotency_payload(response) == {"id": "r1", "self": CIRCULAR}

    def test_input_not_mutated(self):
        response = {"phone": "+27821234567", "token": "t"}
        sanitize_idempotency_payload(response)
        assert response == {"phone": "+27821234567", "token": "t"}
