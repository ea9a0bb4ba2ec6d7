"""Tests for session response processing."""

import json

import pytest

from annotator_client.errors import ApplicationError
from annotator_client.session.response import ParsedEnvelope, process_response


class TestProcessResponse:
    """Tests for process_response()."""

    def test_parses_model_and_flash(self):
        """Should lift the model and keep flash messages."""
        body = json.dumps({"model": {"userid": "u1"}, "flash": {"error": ["bad thing"]}})

        envelope = process_response(body, 200)

        assert isinstance(envelope, ParsedEnvelope)
        assert envelope.model.userid == "u1"
        assert envelope.flash == [("error", "bad thing")]
        assert envelope.is_error is False

    def test_server_error_is_transport_failure(self):
        """Should yield nothing usable for 5xx responses."""
        assert process_response(json.dumps({"model": {"userid": "u1"}}), 502) is None

    @pytest.mark.parametrize("status", [100, 199, 500, 503])
    def test_outside_parse_range(self, status):
        assert process_response("{}", status) is None

    @pytest.mark.parametrize("status", [200, 201, 302, 400, 404, 499])
    def test_inside_parse_range(self, status):
        assert process_response("{}", status) is not None

    def test_missing_model_defaults_to_empty(self):
        """Should use an empty model when the envelope has none."""
        envelope = process_response("{}", 200)

        assert envelope.model.userid is None
        assert envelope.model.csrf is None
        assert envelope.model.groups == []

    def test_errors_and_reason_merged_onto_model(self):
        """Should copy errors and reason onto the model."""
        body = {"model": {"userid": None}, "errors": {"username": "required"}, "reason": "Bad login"}

        envelope = process_response(json.dumps(body), 400)

        assert envelope.is_error is True
        assert envelope.model.errors == {"username": "required"}
        assert envelope.model.reason == "Bad login"

    def test_flash_preserves_order(self):
        """Should keep messages in order within and across kinds."""
        body = {"flash": {"success": ["a", "b"], "warning": ["c"]}}

        envelope = process_response(json.dumps(body), 200)

        assert envelope.flash == [("success", "a"), ("success", "b"), ("warning", "c")]

    def test_accepts_bytes_and_dict(self):
        payload = {"model": {"csrf": "tok"}}

        assert process_response(json.dumps(payload).encode(), 200).model.csrf == "tok"
        assert process_response(payload, 200).model.csrf == "tok"

    def test_empty_body(self):
        assert process_response(b"", 200).model.userid is None

    def test_invalid_json_raises(self):
        """Should reject a body that is not JSON."""
        with pytest.raises(ApplicationError) as exc_info:
            process_response("<html>oops</html>", 200)

        assert exc_info.value.status_code == 200

    def test_non_object_raises(self):
        with pytest.raises(ApplicationError):
            process_response("[1, 2]", 200)

    def test_flash_string_entry_is_one_message(self):
        """Should treat a bare string as a single message, not one per character."""
        envelope = process_response({"flash": {"error": "Wrong password."}}, 400)

        assert envelope.flash == [("error", "Wrong password.")]

    @pytest.mark.parametrize("flash", [["a", "b"], "oops", 3])
    def test_flash_not_a_mapping_is_ignored(self, flash):
        assert process_response({"flash": flash}, 200).flash == []

    def test_flash_entry_of_unknown_shape_is_skipped(self):
        envelope = process_response({"flash": {"info": None, "warning": ["w"]}}, 200)

        assert envelope.flash == [("warning", "w")]
