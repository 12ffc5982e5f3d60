"""
Conductor error table.

Every failure surfaced to API clients is identified by a short code
(``err1``, ``err11``, ...) that maps to a user-facing message. Services raise
:class:`ConductorError`; the server renders it as ``{"err": true, "errMsg": ...}``.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

CONDUCTOR_ERRORS: Dict[str, str] = {
    "err1": "Required field is missing or malformed.",
    "err2": "Invalid fields supplied.",
    "err3": "An error occured saving information to the database.",
    "err6": "Sorry, we seem to have encountered an internal error.",
    "err7": "Couldn't find a user with that identifier.",
    "err8": "Sorry, you aren't authorized to perform that action.",
    "err9": "Unable to verify user attribute(s).",
    "err10": "Your account does not appear to be associated with any organization.",
    "err11": "A resource with that identifier was not found.",
    "err13": "Commons-Libraries sync appears to have failed. Check server logs.",
    "err16": (
        "Oops, it looks like the LibreTexts API is temporarily unavailable. "
        "Refresh and try again in a moment."
    ),
    "err22": "Sorry, we're having trouble retrieving that data.",
    "err48": "Sorry, we're having trouble finding a Peer Review Rubric to use.",
    "err49": "Oops, this review is missing required responses.",
    "err50": "Oops, Peer Reviews must have at least one response to be saved.",
    "err51": "Oops, a Dropdown Prompt requires at least one response option.",
    "err52": "Oops, this Project's settings do not allow reviews from non-team members.",
    "err72": "C-ID Descriptors sync appears to have failed. Check server logs.",
    "err75": "At least one of a LibreTexts textbook URL or an ADAPT Analytics Sharing Key must be provided.",
    "err76": "Provided Textbook URL is invalid, private, or not a book coverpage.",
    "err77": "Provided ADAPT Analytics Sharing Key is invalid.",
    "err78": "Course end date cannot be before start date.",
    "err80": "Oops, another Project already has that Book associated with it.",
    "err92": (
        "Sorry, an internal error occurred as a result of internal misconfiguration. "
        "Please contact our Support Center for assistance."
    ),
}


class ConductorError(Exception):
    """An error that maps onto the Conductor error envelope.

    Args:
        code: Key into :data:`CONDUCTOR_ERRORS`, or ``None`` with an explicit message
        status_code: HTTP status returned to the client
        message: Overrides the table message
        details: Extra fields merged into the response body
    """

    def __init__(
        self,
        code: Optional[str],
        status_code: int = 500,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        if message is None:
            message = CONDUCTOR_ERRORS.get(code or "", CONDUCTOR_ERRORS["err6"])
        super().__init__(message)
        self.code = code
        self.status_code = status_code
        self.message = message
        self.details = details or {}

    def to_response(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"err": True, "errMsg": self.message}
        if self.code:
            body["errCode"] = self.code
        body.update(self.details)
        return body

    def __repr__(self) -> str:
        return f"ConductorError(code={self.code}, status={self.status_code}, message={self.message!r})"


def bad_request(code: str = "err1", message: Optional[str] = None) -> ConductorError:
    return ConductorError(code, 400, message)


def unauthorized() -> ConductorError:
    return ConductorError("err8", 403)


def not_found(code: str = "err11") -> ConductorError:
    return ConductorError(code, 404)


def conflict(message: str) -> ConductorError:
    return ConductorError(None, 409, message)


def internal_error(code: str = "err6") -> ConductorError:
    return ConductorError(code, 500)


def service_unavailable(code: str = "err16") -> ConductorError:
    return ConductorError(code, 503)
