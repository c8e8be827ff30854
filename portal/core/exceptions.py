# portal/core/exceptions.py
"""
Domain errors for the invitation / provisioning flow.

Every error carries a machine-readable ``code`` and the HTTP status the API
answers with; ``register_exception_handlers`` renders them in the shared
error envelope.
"""
from __future__ import annotations

from typing import Any, Optional


class InvitationError(Exception):
    code = "INVITATION_ERROR"
    status_code = 400
    default_message = "Invitation request failed"

    def __init__(self, message: Optional[str] = None, *, details: Any = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


# --- input validation --------------------------------------------------------

class NoToken(InvitationError):
    code = "NO_TOKEN"
    default_message = "Token is required"


class WeakPassword(InvitationError):
    code = "WEAK_PASSWORD"
    default_message = "Password must be at least 8 characters"


class InvalidBusinessName(InvitationError):
    code = "BUSINESS_NAME_REQUIRED"
    default_message = "Business name is required when creating a new organization"


class InvalidBusinessType(InvitationError):
    code = "INVALID_BUSINESS_TYPE"
    default_message = "Invalid business type"


class OrganizationNotFound(InvitationError):
    code = "ORGANIZATION_NOT_FOUND"
    default_message = "Organization not found"


class ProjectNotFound(InvitationError):
    code = "PROJECT_NOT_FOUND"
    default_message = "Project not found"


# --- token / state conflicts -------------------------------------------------

class InvalidToken(InvitationError):
    code = "INVALID_TOKEN"
    default_message = "Invalid invitation link"


class TokenMismatch(InvitationError):
    code = "INVALID_TOKEN"
    status_code = 403
    default_message = "Invalid token"


class AlreadyAccepted(InvitationError):
    code = "ALREADY_ACCEPTED"
    default_message = "This invitation has already been used"


class Revoked(InvitationError):
    code = "REVOKED"
    default_message = "This invitation has been revoked"


class Expired(InvitationError):
    code = "EXPIRED"
    default_message = "This invitation has expired"


class EmailTaken(InvitationError):
    code = "EMAIL_TAKEN"
    default_message = "An account with this email already exists. Please log in instead."


class PendingInvitationExists(InvitationError):
    code = "PENDING_INVITATION_EXISTS"
    default_message = "A pending invitation already exists for this email"


class InvitationNotPending(InvitationError):
    code = "NOT_PENDING"
    default_message = "This invitation is no longer pending"


class NotDemoInvitation(InvitationError):
    code = "NOT_DEMO"
    default_message = "This is not a demo invitation"


class InvitationNotFound(InvitationError):
    code = "NOT_FOUND"
    status_code = 404
    default_message = "Invitation not found"


class SlugExhausted(InvitationError):
    code = "SLUG_EXHAUSTED"
    status_code = 409
    default_message = "Could not allocate a unique organization slug"
