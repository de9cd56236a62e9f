"""
Error types for IdeaVault.

Store, storage and auth failures are raised as one of these and surfaced to
the caller; the analytics functions never raise them.
"""


class IdeaVaultError(Exception):
    """Base class for all IdeaVault errors."""


class ValidationError(IdeaVaultError, ValueError):
    """Malformed input, e.g. empty idea text or an unknown mood."""


class NotFound(IdeaVaultError):
    """Mutation target does not exist within the caller's owner scope."""


class StoreUnavailable(IdeaVaultError):
    """The data store (or auth service) could not be reached."""


class StorageError(IdeaVaultError):
    """Uploading or removing an image object failed."""


class Unauthenticated(IdeaVaultError):
    """No active user for an owner-scoped operation, or the token was rejected."""


class AuthError(IdeaVaultError):
    """Sign-in or sign-up was rejected by the auth provider."""
