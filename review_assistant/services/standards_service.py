"""
Standards Service for AI Code Review Assistant.

Manages the coding standards considered during analysis. Built-in standards
are seeded once and are read-only afterwards.
"""

import logging
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from review_assistant.exceptions import BuiltInStandardError, StandardNotFoundError, ValidationError
from review_assistant.models.schemas import StandardCreate, StandardUpdate
from review_assistant.models.tables import CodingStandard

BUILT_IN_STANDARDS: list[dict[str, Any]] = [
    {
        "name": "PEP8",
        "description": "Python Enhancement Proposal 8 - Style Guide for Python Code",
        "language": "python",
        "is_active": True,
        "rules": {
            "maxLineLength": 79,
            "indentation": 4,
            "namingConventions": {
                "functions": "snake_case",
                "classes": "PascalCase",
                "constants": "UPPER_CASE",
            },
            "imports": "one per line, grouped by standard library, third-party, local",
        },
    },
    {
        "name": "Google JavaScript Style Guide",
        "description": "Google's JavaScript style guide",
        "language": "javascript",
        "is_active": True,
        "rules": {
            "indentation": 2,
            "quotes": "single",
            "semicolons": "required",
            "namingConventions": {
                "functions": "camelCase",
                "classes": "PascalCase",
                "constants": "UPPER_CASE",
            },
        },
    },
    {
        "name": "Airbnb JavaScript Style Guide",
        "description": "Airbnb's JavaScript style guide",
        "language": "javascript",
        "is_active": False,
        "rules": {
            "indentation": 2,
            "quotes": "single",
            "semicolons": "required",
            "arrowFunctions": "prefer",
            "destructuring": "use when possible",
        },
    },
    {
        "name": "Oracle Java Code Conventions",
        "description": "Oracle's Java coding conventions",
        "language": "java",
        "is_active": True,
        "rules": {
            "indentation": 4,
            "braceStyle": "K&R",
            "namingConventions": {
                "methods": "camelCase",
                "classes": "PascalCase",
                "constants": "UPPER_CASE",
                "packages": "lowercase",
            },
        },
    },
]


class StandardsService:
    """CRUD over coding standards."""

    def __init__(self) -> None:
        self._logger = logging.getLogger("code_review.standards_service")

    def list_standards(
        self,
        session: Session,
        language: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> list[CodingStandard]:
        """List standards, built-ins first, then by name."""
        query = select(CodingStandard)
        if language:
            query = query.where(CodingStandard.language == language)
        if is_active is not None:
            query = query.where(CodingStandard.is_active == is_active)
        query = query.order_by(CodingStandard.is_built_in.desc(), CodingStandard.name.asc())
        return list(session.scalars(query))

    def list_active(self, session: Session) -> list[CodingStandard]:
        """Active standards for every language."""
        return self.list_standards(session, is_active=True)

    def get_standard(self, session: Session, standard_id: str) -> CodingStandard:
        standard = session.get(CodingStandard, standard_id)
        if standard is None:
            raise StandardNotFoundError(standard_id)
        return standard

    def create_standard(self, session: Session, data: StandardCreate) -> CodingStandard:
        """Create a user-defined standard. Created standards are never built-in."""
        standard = CodingStandard(
            name=data.name,
            description=data.description,
            language=data.language,
            rules=data.rules,
            is_active=data.is_active,
            is_built_in=False,
        )
        session.add(standard)
        self._commit_unique(session, data.name)
        self._logger.info(f"Created coding standard {standard.name} ({standard.language})")
        return standard

    def update_standard(self, session: Session, standard_id: str, data: StandardUpdate) -> CodingStandard:
        """
        Apply a partial update.

        Raises:
            StandardNotFoundError: If the standard does not exist.
            BuiltInStandardError: If the standard is built-in.
        """
        standard = self.get_standard(session, standard_id)
        if standard.is_built_in:
            raise BuiltInStandardError("Cannot modify built-in standards")

        for field_name, value in data.model_dump(exclude_unset=True).items():
            setattr(standard, field_name, value)

        self._commit_unique(session, standard.name)
        return standard

    def delete_standard(self, session: Session, standard_id: str) -> None:
        """
        Delete a user-defined standard.

        Raises:
            StandardNotFoundError: If the standard does not exist.
            BuiltInStandardError: If the standard is built-in.
        """
        standard = self.get_standard(session, standard_id)
        if standard.is_built_in:
            raise BuiltInStandardError("Cannot delete built-in standards")

        session.delete(standard)
        session.commit()
        self._logger.info(f"Deleted coding standard {standard.name}")

    def seed_built_in(self, session: Session) -> list[CodingStandard]:
        """
        Create the built-in standards that do not exist yet.

        Returns:
            Standards created by this call (empty when already seeded).
        """
        created = []
        for definition in BUILT_IN_STANDARDS:
            existing = session.scalar(
                select(CodingStandard).where(CodingStandard.name == definition["name"])
            )
            if existing is not None:
                continue

            standard = CodingStandard(is_built_in=True, **definition)
            session.add(standard)
            created.append(standard)

        session.commit()
        self._logger.info(f"Seeded {len(created)} built-in standards")
        return created

    def _commit_unique(self, session: Session, name: str) -> None:
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            raise ValidationError(f'A standard named "{name}" already exists')
