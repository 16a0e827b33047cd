from __future__ import annotations


class DomainError(Exception):
    """Base for domain errors."""


class ConfigurationError(DomainError):
    """Required configuration is missing or malformed."""


class AuthError(DomainError):
    """Caller credential is missing, invalid or expired."""


class ForbiddenError(DomainError):
    """Caller is authenticated but not allowed to use the resource."""


class InvalidRequestError(DomainError):
    """Request is missing a field or carries an invalid value."""


class InvalidPlanError(InvalidRequestError):
    """Plan and billing cycle do not match any catalog price."""


class ExternalServiceError(DomainError):
    """A downstream call (Stripe, OpenAI, Google, database) failed."""


class AssistantRunTimeoutError(ExternalServiceError):
    """Assistant run did not reach a terminal state within the polling budget."""


class SignatureVerificationError(DomainError):
    """Webhook payload does not match its signature."""
