"""
Pytest fixtures for AI Code Review Assistant tests.

Provides an in-memory database, temporary git repositories, stub AI
providers and an API test client.
"""

import json
from pathlib import Path
from typing import Generator, Optional

import pytest
from fastapi.testclient import TestClient
from git import Repo
from sqlalchemy.orm import Session

from review_assistant.config import Settings
from review_assistant.database import Database, create_db_engine, set_database
from review_assistant.dependencies import get_registry, get_review_service
from review_assistant.main import app
from review_assistant.models.schemas import HealthStatus, ProviderHealth
from review_assistant.providers.base import AIProvider, ProviderResponse
from review_assistant.providers.registry import ProviderRegistry
from review_assistant.services.git_service import GitService
from review_assistant.services.review_service import ReviewService
from review_assistant.services.standards_service import StandardsService


def analysis_reply(*issues: dict, recommendations: Optional[dict] = None) -> str:
    """Build a model reply in the shape the analysis prompt asks for."""
    body = {"issues": list(issues)}
    if recommendations is not None:
        body["recommendations"] = recommendations
    return "Here is my analysis:\n```json\n" + json.dumps(body) + "\n```"


MINOR_ISSUE = {
    "line": 1,
    "severity": "MINOR",
    "category": "style",
    "title": "Use const instead of var",
    "description": "var is function scoped",
    "suggestion": "const x = 1",
    "autoFixable": True,
}


class StubProvider(AIProvider):
    """Provider returning canned replies and recording every prompt."""

    def __init__(
        self,
        name: str = "ollama",
        analysis_text: str = '{"issues": []}',
        effort_text: str = '{"totalEffort": 1.5, "breakdown": []}',
        fix_text: str = "FIXED_CODE:\n```javascript\nconst x = 1;\n```",
        health: Optional[ProviderHealth] = None,
        tokens: int = 10,
    ) -> None:
        super().__init__(name, "stub-model")
        self.analysis_text = analysis_text
        self.effort_text = effort_text
        self.fix_text = fix_text
        self.health = health or ProviderHealth(status=HealthStatus.OK, message="ok", model="stub-model")
        self.tokens = tokens
        self.analysis_prompts: list[str] = []
        self.effort_prompts: list[str] = []
        self.fix_prompts: list[str] = []

    async def health_check(self) -> ProviderHealth:
        return self.health

    async def analyze_code(self, prompt: str) -> ProviderResponse:
        self.analysis_prompts.append(prompt)
        return ProviderResponse(self.analysis_text, self.tokens)

    async def estimate_effort(self, prompt: str) -> ProviderResponse:
        self.effort_prompts.append(prompt)
        return ProviderResponse(self.effort_text, self.tokens)

    async def generate_fix(self, prompt: str) -> ProviderResponse:
        self.fix_prompts.append(prompt)
        return ProviderResponse(self.fix_text, self.tokens)


@pytest.fixture
def test_settings() -> Settings:
    """Provide settings independent of the environment."""
    return Settings(
        _env_file=None,
        database_url="sqlite://",
        ai_provider="ollama",
        min_changed_code_length=5,
        log_level="DEBUG",
    )


@pytest.fixture
def database(test_settings) -> Generator[Database, None, None]:
    """Provide an initialized in-memory database."""
    db = Database(settings=test_settings, engine=create_db_engine("sqlite://"))
    db.init()
    yield db
    db.dispose()


@pytest.fixture
def session(database) -> Generator[Session, None, None]:
    """Provide a database session."""
    with database.session() as s:
        yield s


@pytest.fixture
def ollama_stub() -> StubProvider:
    return StubProvider("ollama", analysis_text=analysis_reply(MINOR_ISSUE))


@pytest.fixture
def gemini_stub() -> StubProvider:
    return StubProvider("gemini", analysis_text=analysis_reply())


@pytest.fixture
def registry(ollama_stub, gemini_stub, test_settings) -> ProviderRegistry:
    """Provide a registry over stub providers."""
    return ProviderRegistry(
        providers={"ollama": ollama_stub, "gemini": gemini_stub},
        default="ollama",
        settings=test_settings,
    )


@pytest.fixture
def review_service(registry, test_settings) -> ReviewService:
    """Provide a review service wired to the stub registry."""
    return ReviewService(
        registry,
        git_service=GitService(min_changed_code_length=test_settings.min_changed_code_length),
        standards_service=StandardsService(),
        settings=test_settings,
    )


@pytest.fixture
def git_repo(tmp_path) -> Repo:
    """Provide a git repository with one initial commit."""
    repo = Repo.init(tmp_path)
    with repo.config_writer() as config:
        config.set_value("user", "name", "Test Developer")
        config.set_value("user", "email", "developer@example.com")

    (tmp_path / "README.md").write_text("# Sample\n")
    repo.git.add("README.md")
    repo.git.commit("-m", "Initial commit")
    return repo


def write_file(repo: Repo, relative_path: str, content: str, stage: bool = True) -> Path:
    """Write a file into the working tree and optionally stage it."""
    path = Path(repo.working_tree_dir) / relative_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    if stage:
        repo.git.add(relative_path)
    return path


@pytest.fixture
def test_client(database, registry, review_service) -> Generator[TestClient, None, None]:
    """Provide a test client backed by the in-memory database and stub providers."""
    set_database(database)
    app.dependency_overrides[get_registry] = lambda: registry
    app.dependency_overrides[get_review_service] = lambda: review_service

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
    set_database(None)
