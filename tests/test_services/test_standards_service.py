"""
Tests for Standards Service.
"""

import pytest

from review_assistant.exceptions import (
    BuiltInStandardError,
    StandardNotFoundError,
    ValidationError,
)
from review_assistant.models.schemas import StandardCreate, StandardUpdate
from review_assistant.services.standards_service import StandardsService


@pytest.fixture
def standards_service() -> StandardsService:
    return StandardsService()


def _create(service, session, name="Team Rules", language="python", is_active=True):
    return service.create_standard(
        session,
        StandardCreate(name=name, language=language, rules={"maxLineLength": 100}, is_active=is_active),
    )


class TestSeeding:
    """Tests for seeding the built-in standards."""

    def test_seed_is_idempotent(self, standards_service, session):
        first = standards_service.seed_built_in(session)
        second = standards_service.seed_built_in(session)

        assert len(first) == 4
        assert all(s.is_built_in for s in first)
        assert second == []
        assert len(standards_service.list_standards(session)) == 4

    def test_airbnb_inactive(self, standards_service, session):
        standards_service.seed_built_in(session)

        active = {s.name for s in standards_service.list_active(session)}

        assert "Airbnb JavaScript Style Guide" not in active
        assert "PEP8" in active


class TestStandardsCrud:
    """Tests for standard CRUD operations."""

    def test_list_orders_built_in_first(self, standards_service, session):
        _create(standards_service, session, name="AAA Custom")
        standards_service.seed_built_in(session)

        names = [s.name for s in standards_service.list_standards(session)]

        assert names[-1] == "AAA Custom"
        assert names[:4] == sorted(names[:4])

    def test_list_filters(self, standards_service, session):
        standards_service.seed_built_in(session)

        javascript = standards_service.list_standards(session, language="javascript")
        active_js = standards_service.list_standards(session, language="javascript", is_active=True)

        assert len(javascript) == 2
        assert [s.name for s in active_js] == ["Google JavaScript Style Guide"]

    def test_create(self, standards_service, session):
        standard = _create(standards_service, session)

        assert standard.id
        assert standard.is_built_in is False
        assert standard.rules == {"maxLineLength": 100}

    def test_duplicate_name(self, standards_service, session):
        _create(standards_service, session)

        with pytest.raises(ValidationError) as exc_info:
            _create(standards_service, session)

        assert exc_info.value.status_code == 400

    def test_partial_update(self, standards_service, session):
        standard = _create(standards_service, session)

        updated = standards_service.update_standard(
            session, standard.id, StandardUpdate(is_active=False)
        )

        assert updated.is_active is False
        assert updated.name == "Team Rules"
        assert updated.rules == {"maxLineLength": 100}

    def test_update_built_in_forbidden(self, standards_service, session):
        pep8 = standards_service.seed_built_in(session)[0]

        with pytest.raises(BuiltInStandardError) as exc_info:
            standards_service.update_standard(session, pep8.id, StandardUpdate(is_active=False))

        assert exc_info.value.status_code == 403

    def test_delete(self, standards_service, session):
        standard = _create(standards_service, session)
        standard_id = standard.id

        standards_service.delete_standard(session, standard_id)

        with pytest.raises(StandardNotFoundError):
            standards_service.get_standard(session, standard_id)

    def test_delete_built_in_forbidden(self, standards_service, session):
        pep8 = standards_service.seed_built_in(session)[0]

        with pytest.raises(BuiltInStandardError):
            standards_service.delete_standard(session, pep8.id)

    def test_get_missing(self, standards_service, session):
        with pytest.raises(StandardNotFoundError) as exc_info:
            standards_service.get_standard(session, "missing-id")

        assert exc_info.value.status_code == 404
