"""
Exception hierarchy for AI Code Review Assistant.

Every error carries the HTTP status it is rendered with by the API layer.
"""

from typing import Optional


class ReviewAssistantError(Exception):
    """Base class for all application errors."""

    status_code: int = 500
    error: str = "Review Error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


# Domain preconditions


class InvalidRepositoryError(ReviewAssistantError):
    """Path is not a git working tree."""

    error = "Invalid Repository"


class NoChangesError(ReviewAssistantError):
    """Neither staged nor modified changes exist."""

    error = "No Changes"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(
            message
            or "No staged or modified changes found. "
            "Please stage your changes first using 'git add'."
        )


class NoSupportedFilesError(ReviewAssistantError):
    """No changed file survived the language and size filters."""

    error = "No Supported Files"


class CommitNotFoundError(ReviewAssistantError):
    """Commit hash does not resolve in the repository."""

    error = "Commit Not Found"

    def __init__(self, commit_hash: str) -> None:
        super().__init__(f"Commit {commit_hash} not found in repository")
        self.commit_hash = commit_hash


class NotAutoFixableError(ReviewAssistantError):
    """Fix requested for an issue that is not auto-fixable."""

    error = "Not Auto-Fixable"

    def __init__(self, message: str = "This issue is not auto-fixable") -> None:
        super().__init__(message)


class UnsupportedLanguageError(ReviewAssistantError):
    """File extension is not in the supported-language table."""

    error = "Unsupported File Type"


# Lookups and permissions


class NotFoundError(ReviewAssistantError):
    """Requested record does not exist."""

    status_code = 404
    error = "Not Found"


class ReviewNotFoundError(NotFoundError):
    def __init__(self, review_id: str) -> None:
        super().__init__("Review not found")
        self.review_id = review_id


class IssueNotFoundError(NotFoundError):
    def __init__(self, issue_id: str) -> None:
        super().__init__("Issue not found")
        self.issue_id = issue_id


class UserNotFoundError(NotFoundError):
    def __init__(self, user_id: int) -> None:
        super().__init__(f"User {user_id} not found")
        self.user_id = user_id


class StandardNotFoundError(NotFoundError):
    def __init__(self, standard_id: str) -> None:
        super().__init__("Standard not found")
        self.standard_id = standard_id


class BuiltInStandardError(ReviewAssistantError):
    """Built-in standards are read-only."""

    status_code = 403
    error = "Forbidden"


class ValidationError(ReviewAssistantError):
    """Required request fields are missing or invalid."""

    status_code = 400
    error = "Bad Request"


class InvalidProviderError(ValidationError):
    def __init__(self, provider: str) -> None:
        super().__init__(f'Invalid provider "{provider}". Must be "ollama" or "gemini"')
        self.provider = provider


# Upstream services


class ProviderError(ReviewAssistantError):
    """Transport or HTTP failure talking to an AI provider."""

    error = "AI Provider Error"

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class ProviderNotConfiguredError(ProviderError):
    """Provider is missing its API key or model."""

    error = "AI Provider Not Configured"


class ProviderUnavailableError(ProviderError):
    """Health check reported the provider as unusable."""

    error = "AI Provider Unavailable"

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(provider, f"not available: {message}")
