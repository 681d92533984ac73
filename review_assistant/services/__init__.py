"""
Services package for AI Code Review Assistant.

Contains business logic services for git access, review orchestration and
coding standards.
"""

from review_assistant.services.git_service import ChangeSet, FileChange, GitService
from review_assistant.services.review_service import ReviewService
from review_assistant.services.standards_service import StandardsService

__all__ = [
    "ChangeSet",
    "FileChange",
    "GitService",
    "ReviewService",
    "StandardsService",
]
