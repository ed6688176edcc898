"""
Tests for credential scrubbing and the request wide event.
"""

from golden_ai.core.logging import (
    REDACTED,
    enrich_event,
    finalize_request_event,
    init_request_event,
    redact_secrets,
    should_sample,
)


class TestRedactSecrets:

    def test_masks_key_fields(self) -> None:
        event = redact_secrets(None, "info", {"event": "profile_created", "api_key": "sk-or-v1-abc"})

        assert event["api_key"] == REDACTED
        assert event["event"] == "profile_created"

    def test_empty_key_field_left_alone(self) -> None:
        event = redact_secrets(None, "info", {"api_key": ""})

        assert event["api_key"] == ""

    def test_masks_tokens_inside_strings(self) -> None:
        event = redact_secrets(None, "warning", {
            "event": "ai_model_failed",
            "error": "401 - invalid key sk-or-v1-0123456789abcdef0123",
        })

        assert "sk-or-v1" not in event["error"]
        assert event["error"].startswith("401 - invalid key ")

    def test_masks_bearer_header_nested(self) -> None:
        event = redact_secrets(None, "info", {
            "request": {"headers": [{"Authorization": "Bearer abcdefgh12345"}]},
            "detail": "sent Bearer abcdefgh12345",
        })

        assert event["request"]["headers"][0]["Authorization"] == REDACTED
        assert event["detail"] == f"sent {REDACTED}"

    def test_short_sk_prefix_untouched(self) -> None:
        event = redact_secrets(None, "info", {"event": "task-sk-1"})

        assert event["event"] == "task-sk-1"


class TestWideEvent:

    def test_enrich_nested(self) -> None:
        init_request_event(request_id="req1", method="POST", path="/api/v1/ai/chat")

        enrich_event(**{"ai.task": "chat", "ai.model_used": "m"})
        event = finalize_request_event(200)

        assert event["request_id"] == "req1"
        assert event["ai"] == {"task": "chat", "model_used": "m"}
        assert event["http"]["status_code"] == 200
        assert event["outcome"] == "success"

    def test_finalize_with_error(self) -> None:
        init_request_event(method="GET", path="/api/v1/admin/ai/status")

        event = finalize_request_event(500, ValueError("boom"))

        assert event["outcome"] == "error"
        assert event["error"]["type"] == "ValueError"
        assert event["error"]["message"] == "boom"

    def test_sampling_keeps_ai_and_errors(self) -> None:
        assert should_sample({"http": {"status_code": 200}, "ai": {"task": "chat"}})
        assert should_sample({"http": {"status_code": 404}})
        assert should_sample({"http": {"status_code": 200}, "duration_ms": 10_000})
