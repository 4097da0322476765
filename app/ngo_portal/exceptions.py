"""
Error taxonomy for the portal.

Controllers raise these; the handler registered in ``main.py`` turns them
into ``ErrorResponseModel`` bodies with the matching HTTP status.
"""

from typing import Optional, Any, Dict


class PortalError(Exception):
    """Base exception for all portal errors"""

    status_code = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(PortalError):
    """Missing or malformed input"""

    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class AuthenticationError(PortalError):
    """Bad credentials or an invalid/expired token"""

    status_code = 401

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, code="AUTH_FAILED")


class AuthorizationError(PortalError):
    """Identity is valid but the role is not allowed"""

    status_code = 403

    def __init__(self, message: str = "Not authorized", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="NOT_AUTHORIZED", details=details)


class AccountNotApprovedError(AuthorizationError):
    """Credentials are correct but the company/ngo account is not approved yet"""

    def __init__(self, approval_status: str, rejection_reason: Optional[str] = None):
        if approval_status == "rejected":
            message = f"Your account has been rejected. Reason: {rejection_reason or 'No reason provided'}"
        else:
            message = "Your account is pending approval. Please wait for admin approval."
        details = {"approvalStatus": approval_status, "isApproved": False}
        if rejection_reason is not None:
            details["rejectionReason"] = rejection_reason
        super().__init__(message, details=details)
        self.code = "ACCOUNT_NOT_APPROVED"


class NotFoundError(PortalError):
    """Unknown account, event or program"""

    status_code = 404

    def __init__(self, resource: str, resource_id: Any = None):
        message = f"{resource} not found"
        details = {"resource": resource}
        if resource_id is not None:
            details["id"] = resource_id
        super().__init__(message, code="NOT_FOUND", details=details)


class ConflictError(PortalError):
    """The request clashes with existing state (duplicate join, duplicate email)"""

    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="CONFLICT", details=details)


class InvalidTransitionError(ConflictError):
    """Approval transition not present in the transition table"""

    def __init__(self, current: str, target: str):
        super().__init__(
            f"Cannot move account from '{current}' to '{target}'",
            details={"from": current, "to": target},
        )
        self.code = "INVALID_TRANSITION"
