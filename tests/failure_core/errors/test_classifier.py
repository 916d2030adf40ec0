"""
Tests for workflow step failure classification.
"""

import logging

import pytest

from failure_core.errors import (
    CATEGORY_RULES,
    UNKNOWN_ERROR_MESSAGE,
    FailureCoreError,
    StepConfigError,
    UnknownStepTypeError,
    WorkflowErrorClassifier,
    classify,
    classify_workflow_error,
    error_category,
    get_error_message,
    get_error_stack,
    is_retriable,
)
from failure_core.types import ErrorCategory, ErrorClassifier


def _raised(exc: BaseException) -> BaseException:
    try:
        raise exc
    except BaseException as caught:
        return caught


class TestWorkflowErrorClassification:

    def test_timeout_errors_are_retriable(self):
        error = Exception("Request timed out after 30s")
        assert error_category(error) == ErrorCategory.TIMEOUT
        assert is_retriable(error) is True
        assert classify_workflow_error(error).retriable is True

    def test_transient_network_errors_are_retriable(self):
        error = Exception("ECONNRESET while contacting provider")
        assert error_category(error) == ErrorCategory.TRANSIENT_NETWORK
        assert is_retriable(error) is True

    def test_rate_limit_and_5xx_errors_are_retriable(self):
        rate_limited = Exception("429 too many requests")
        provider_5xx = Exception("503 service unavailable")

        assert error_category(rate_limited) == ErrorCategory.RATE_LIMIT
        assert is_retriable(rate_limited) is True

        assert error_category(provider_5xx) == ErrorCategory.PROVIDER_5XX
        assert is_retriable(provider_5xx) is True

    def test_validation_missing_config_and_unknown_step_are_not_retriable(self):
        validation = Exception("validation failed: invalid payload")
        missing_config = Exception("send_message step requires a valid channel in config.channel")
        unknown_step = Exception("Unknown step type: random_custom_step")

        assert error_category(validation) == ErrorCategory.VALIDATION
        assert is_retriable(validation) is False

        assert error_category(missing_config) == ErrorCategory.MISSING_CONFIG
        assert is_retriable(missing_config) is False

        assert error_category(unknown_step) == ErrorCategory.MISSING_CONFIG
        assert is_retriable(unknown_step) is False

    def test_provider_4xx_is_not_retriable(self):
        for message in ("HTTP 401", "403 Forbidden", "resource not found", "Unauthorized"):
            assert error_category(message) == ErrorCategory.PROVIDER_4XX
            assert is_retriable(message) is False

    def test_unmatched_message_is_unknown(self):
        result = classify_workflow_error(Exception("something odd happened"))
        assert result.category == ErrorCategory.UNKNOWN
        assert result.retriable is False

    def test_classify_alias(self):
        assert classify is classify_workflow_error


class TestCategoryMarkers:

    @pytest.mark.parametrize(
        "message,expected",
        [
            ("Operation timeout", ErrorCategory.TIMEOUT),
            ("ETIMEDOUT", ErrorCategory.TIMEOUT),
            ("connect ECONNREFUSED 127.0.0.1:443", ErrorCategory.TRANSIENT_NETWORK),
            ("getaddrinfo ENOTFOUND api.example.com", ErrorCategory.TRANSIENT_NETWORK),
            ("EHOSTUNREACH", ErrorCategory.TRANSIENT_NETWORK),
            ("Network is unreachable", ErrorCategory.TRANSIENT_NETWORK),
            ("socket hang up", ErrorCategory.TRANSIENT_NETWORK),
            ("Rate limit exceeded", ErrorCategory.RATE_LIMIT),
            ("Too Many Requests", ErrorCategory.RATE_LIMIT),
            ("HTTP 500", ErrorCategory.PROVIDER_5XX),
            ("502 Bad Gateway", ErrorCategory.PROVIDER_5XX),
            ("gateway returned 504", ErrorCategory.PROVIDER_5XX),
            ("Internal Server Error", ErrorCategory.PROVIDER_5XX),
            ("HTTP 404", ErrorCategory.PROVIDER_4XX),
            ("Missing config for webhook", ErrorCategory.MISSING_CONFIG),
            ("Provider not configured", ErrorCategory.MISSING_CONFIG),
            ("Unprocessable entity", ErrorCategory.VALIDATION),
            ("schema mismatch on field amount", ErrorCategory.VALIDATION),
            ("Bad Request", ErrorCategory.VALIDATION),
            ("status 422", ErrorCategory.VALIDATION),
        ],
    )
    def test_marker_matches_category(self, message, expected):
        assert error_category(message) == expected

    def test_matching_is_case_insensitive(self):
        assert error_category("REQUEST TIMED OUT") == ErrorCategory.TIMEOUT
        assert error_category("ReQuIrEs A vAlId token") == ErrorCategory.MISSING_CONFIG

    def test_rule_table_order(self):
        assert [category for category, _ in CATEGORY_RULES] == [
            ErrorCategory.TIMEOUT,
            ErrorCategory.TRANSIENT_NETWORK,
            ErrorCategory.RATE_LIMIT,
            ErrorCategory.PROVIDER_5XX,
            ErrorCategory.PROVIDER_4XX,
            ErrorCategory.MISSING_CONFIG,
            ErrorCategory.VALIDATION,
        ]


class TestPrecedence:
    """First matching rule wins when markers from several categories appear."""

    def test_rate_limit_beats_validation(self):
        result = classify_workflow_error(Exception("429 invalid payload"))
        assert result.category == ErrorCategory.RATE_LIMIT
        assert result.retriable is True

    @pytest.mark.parametrize(
        "suffix",
        ["invalid", "validation error", "schema", "bad request", "not found", "requires a valid"],
    )
    def test_429_always_wins_over_later_rules(self, suffix):
        assert error_category(f"429 {suffix}") == ErrorCategory.RATE_LIMIT

    def test_timeout_beats_5xx(self):
        assert error_category("504 gateway timeout") == ErrorCategory.TIMEOUT

    def test_network_beats_rate_limit(self):
        assert error_category("network error: 429") == ErrorCategory.TRANSIENT_NETWORK

    def test_5xx_beats_4xx(self):
        assert error_category("503 after 401 retry") == ErrorCategory.PROVIDER_5XX

    def test_4xx_beats_missing_config(self):
        assert error_category("404: step requires a valid id") == ErrorCategory.PROVIDER_4XX

    def test_missing_config_beats_validation(self):
        assert error_category("not configured: invalid channel") == ErrorCategory.MISSING_CONFIG


class TestGetErrorMessage:

    def test_exception_message(self):
        assert get_error_message(ValueError("bad value")) == "bad value"

    def test_string_returned_as_is(self):
        assert get_error_message("  raw text  ") == "  raw text  "

    def test_none_falls_back(self):
        assert get_error_message(None) == UNKNOWN_ERROR_MESSAGE

    def test_empty_string_falls_back(self):
        assert get_error_message("") == UNKNOWN_ERROR_MESSAGE

    def test_mapping_serialized_as_compact_json(self):
        assert get_error_message({"code": 429, "detail": "slow down"}) == (
            '{"code":429,"detail":"slow down"}'
        )

    def test_list_serialized(self):
        assert get_error_message(["a", 1]) == '["a",1]'

    def test_number_serialized(self):
        assert get_error_message(503) == "503"

    def test_object_serialized_by_attributes(self):
        class ProviderFailure:
            def __init__(self):
                self.status = "rate limit exceeded"

        assert get_error_message(ProviderFailure()) == '{"status":"rate limit exceeded"}'

    def test_circular_value_falls_back(self):
        payload = {}
        payload["self"] = payload
        assert get_error_message(payload) == UNKNOWN_ERROR_MESSAGE

    def test_unserializable_value_falls_back(self):
        class Hostile:
            __slots__ = ()

            def __str__(self):
                raise RuntimeError("no")

        assert get_error_message(Hostile()) == UNKNOWN_ERROR_MESSAGE

    def test_exception_message_attribute_preferred(self):
        cause = OSError("disk")
        err = FailureCoreError("write failed", cause=cause)
        assert "Caused by" in str(err)
        assert get_error_message(err) == "write failed"

    def test_empty_exception_message_used_as_is(self):
        assert get_error_message(TimeoutError()) == ""
        assert error_category(TimeoutError()) == ErrorCategory.UNKNOWN

    def test_exception_type_name_is_not_matched(self):
        class InvalidStateError(Exception):
            pass

        result = classify_workflow_error(InvalidStateError())

        assert result.category == ErrorCategory.UNKNOWN
        assert result.retriable is False

    def test_exception_with_failing_str(self):
        class BrokenError(Exception):
            def __str__(self):
                raise RuntimeError("boom")

        assert get_error_message(BrokenError()) == UNKNOWN_ERROR_MESSAGE

    def test_exception_with_failing_message_property(self):
        class BrokenMessageError(Exception):
            @property
            def message(self):
                raise RuntimeError("boom")

        assert get_error_message(BrokenMessageError("timeout")) == UNKNOWN_ERROR_MESSAGE
        result = classify_workflow_error(BrokenMessageError("timeout"))
        assert result.category == ErrorCategory.UNKNOWN
        assert result.stack is not None


class TestGetErrorStack:

    def test_raised_exception_has_traceback(self):
        stack = get_error_stack(_raised(ValueError("bad value")))
        assert stack.startswith("Traceback")
        assert "ValueError: bad value" in stack

    def test_unraised_exception_has_header(self):
        stack = get_error_stack(ValueError("bad value"))
        assert stack is not None
        assert "ValueError: bad value" in stack

    @pytest.mark.parametrize("value", ["text", None, {"a": 1}, 42])
    def test_non_exception_has_no_stack(self, value):
        assert get_error_stack(value) is None


class TestTotality:

    @pytest.mark.parametrize(
        "value",
        [None, "", 0, False, [], {}, object(), b"\xff", {1, 2}, Exception()],
    )
    def test_classify_never_raises(self, value):
        result = classify_workflow_error(value)
        assert isinstance(result.message, str)
        assert isinstance(result.category, ErrorCategory)

    def test_empty_string_is_unknown(self):
        result = classify_workflow_error("")
        assert result.category == ErrorCategory.UNKNOWN
        assert result.retriable is False
        assert result.message == UNKNOWN_ERROR_MESSAGE
        assert result.stack is None

    def test_none_is_unknown(self):
        result = classify_workflow_error(None)
        assert result.category == ErrorCategory.UNKNOWN
        assert result.retriable is False
        assert result.message == UNKNOWN_ERROR_MESSAGE


class TestStepExceptions:

    def test_step_config_error_classifies_as_missing_config(self):
        err = StepConfigError("send_message", "channel")
        assert str(err) == "send_message step requires a valid channel in config.channel"
        assert err.context == {"step_type": "send_message", "field": "channel"}
        assert error_category(err) == ErrorCategory.MISSING_CONFIG

    def test_unknown_step_type_error_classifies_as_missing_config(self):
        err = UnknownStepTypeError("random_custom_step")
        assert str(err) == "Unknown step type: random_custom_step"
        assert err.step_type == "random_custom_step"
        assert error_category(err) == ErrorCategory.MISSING_CONFIG


class TestWorkflowErrorClassifier:

    def test_satisfies_protocol(self):
        classifier: ErrorClassifier = WorkflowErrorClassifier()
        assert classifier.classify_error("HTTP 429") == ErrorCategory.RATE_LIMIT
        assert classifier.is_transient("HTTP 429") is True
        assert classifier.is_transient("HTTP 403") is False

    def test_classify_logs_category(self, caplog):
        classifier = WorkflowErrorClassifier()
        with caplog.at_level(logging.DEBUG, logger="failure_core.errors.classifier"):
            result = classifier.classify(Exception("socket hang up"))

        assert result.category == ErrorCategory.TRANSIENT_NETWORK
        assert caplog.records[-1].error_category == "transient_network"
        assert caplog.records[-1].retriable is True
