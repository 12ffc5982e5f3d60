"""Unit tests for the Conductor error table and error helpers."""

import pytest

from conductor.core.errors import (
    CONDUCTOR_ERRORS,
    ConductorError,
    bad_request,
    conflict,
    internal_error,
    not_found,
    service_unavailable,
    unauthorized,
)


class TestConductorError:
    def test_message_from_table(self):
        exc = ConductorError("err11", 404)

        assert exc.message == CONDUCTOR_ERRORS["err11"]
        assert str(exc) == CONDUCTOR_ERRORS["err11"]

    def test_unknown_code_falls_back_to_internal_message(self):
        assert ConductorError("err999").message == CONDUCTOR_ERRORS["err6"]

    def test_explicit_message_wins(self):
        assert ConductorError("err1", 400, message="Nothing to update.").message == "Nothing to update."

    def test_to_response(self):
        exc = ConductorError("err77", 400, details={"field": "adaptSharingKey"})

        assert exc.to_response() == {
            "err": True,
            "errMsg": CONDUCTOR_ERRORS["err77"],
            "errCode": "err77",
            "field": "adaptSharingKey",
        }

    def test_repr(self):
        assert "err11" in repr(not_found())


class TestErrorHelpers:
    @pytest.mark.parametrize(
        "exc, status, code",
        [
            (bad_request(), 400, "err1"),
            (bad_request("err78"), 400, "err78"),
            (unauthorized(), 403, "err8"),
            (not_found(), 404, "err11"),
            (internal_error(), 500, "err6"),
            (service_unavailable(), 503, "err16"),
        ],
    )
    def test_status_and_code(self, exc, status, code):
        assert exc.status_code == status
        assert exc.code == code

    def test_conflict_has_no_code(self):
        exc = conflict("Already running.")

        assert exc.status_code == 409
        assert exc.to_response() == {"err": True, "errMsg": "Already running."}
