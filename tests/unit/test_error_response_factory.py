"""
Error Response Factory Unit Tests
Tests for response envelopes and the Socket.IO error handling decorator.
"""

import pytest
from unittest.mock import patch

from bluffdict.core.errors import ErrorCode, NotFoundError, ValidationError
from bluffdict.services.error_response_factory import ErrorResponseFactory, with_error_handling


class TestErrorResponseFactory:
    """Response envelopes"""

    def setup_method(self):
        self.factory = ErrorResponseFactory()

    def test_success_response(self):
        assert self.factory.create_success_response({"room_id": "abc"}) == {
            "success": True,
            "data": {"room_id": "abc"}
        }

    def test_error_response(self):
        response = self.factory.create_error_response(ErrorCode.SELF_VOTE, "No", {"choice_id": "ann"})

        assert response == {
            "success": False,
            "error": {"code": "SELF_VOTE", "message": "No", "details": {"choice_id": "ann"}}
        }

    def test_error_response_defaults_details(self):
        response = self.factory.create_error_response(ErrorCode.INTERNAL_ERROR, "Oops")
        assert response["error"]["details"] == {}

    def test_handle_game_error_keeps_code(self):
        error = NotFoundError(ErrorCode.ROUND_NOT_FOUND, "Round r3 not found")
        assert self.factory.handle_exception(error) == (ErrorCode.ROUND_NOT_FOUND, "Round r3 not found")

    def test_handle_unexpected_exception(self):
        code, message = self.factory.handle_exception(KeyError("boom"), "handler")

        assert code == ErrorCode.INTERNAL_ERROR
        assert "boom" not in message

    @patch('bluffdict.services.error_response_factory.emit')
    def test_emit_error(self, mock_emit):
        self.factory.emit_error(ErrorCode.WRONG_PHASE, "Not now")

        mock_emit.assert_called_once_with('error', {
            "success": False,
            "error": {"code": "WRONG_PHASE", "message": "Not now", "details": {}}
        })


class TestWithErrorHandling:
    """Decorator behavior"""

    @patch('bluffdict.services.error_response_factory.emit')
    def test_passes_through_results(self, mock_emit):
        @with_error_handling
        def handler(data):
            return data["value"]

        assert handler({"value": 3}) == 3
        mock_emit.assert_not_called()

    @patch('bluffdict.services.error_response_factory.emit')
    def test_game_error_is_emitted(self, mock_emit):
        @with_error_handling
        def handler(data):
            raise ValidationError(ErrorCode.MISSING_CHOICE, "A choice is required", {"field": "choice_id"})

        assert handler({}) is None

        event, payload = mock_emit.call_args[0]
        assert event == 'error'
        assert payload["error"] == {
            "code": "MISSING_CHOICE", "message": "A choice is required", "details": {"field": "choice_id"}
        }

    @patch('bluffdict.services.error_response_factory.emit')
    def test_unexpected_error_becomes_internal_error(self, mock_emit):
        @with_error_handling
        def handler(data):
            raise RuntimeError("database exploded")

        handler(None)

        payload = mock_emit.call_args[0][1]
        assert payload["error"]["code"] == "INTERNAL_ERROR"

    def test_wraps_keeps_name(self):
        @with_error_handling
        def handle_something(data):
            """Docs"""

        assert handle_something.__name__ == "handle_something"
        assert handle_something.__doc__ == "Docs"
