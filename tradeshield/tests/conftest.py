import json
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tradeshield.api.dependencies import get_analysis_service, get_db
from tradeshield.api.server import app
from tradeshield.database import init_db
from tradeshield.services.analysis_service import AnalysisService
from tradeshield.services.llm_client import LLMClient


class FakeCompletions:
    """Stands in for ``OpenAI().chat.completions``."""

    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content, refusal=None)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeOpenAI:
    def __init__(self, content=None, error=None):
        if content is not None and not isinstance(content, str):
            content = json.dumps(content, ensure_ascii=False)
        self.completions = FakeCompletions(content, error)
        self.chat = SimpleNamespace(completions=self.completions)


@pytest.fixture
def make_service():
    """Build an AnalysisService around a fake OpenAI client."""
    def _make(content=None, error=None, strict_output=False, configured=True):
        fake = FakeOpenAI(content=content, error=error) if configured else None
        service = AnalysisService(LLMClient(client=fake, model="gpt-4o"), strict_output=strict_output)
        return service, fake

    return _make


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine):
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def use_service():
    """Install an AnalysisService for the API under test."""
    def _use(service):
        app.dependency_overrides[get_analysis_service] = lambda: service
        return service

    return _use


@pytest.fixture
def client(db_session):
    """FastAPI test client bound to an in-memory database."""
    def _get_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def listing_output():
    """High-risk listing analysis as the model would return it."""
    return {
        "riskScore": 85,
        "detectedPatterns": ["urgent_language", "prepayment_demand"],
        "warnings": [
            "Seller is using urgent language to pressure buyers",
            "Requesting prepayment without buyer protection",
        ],
        "recommendations": [
            "Do not send payment before receiving the item",
            "Use a platform with buyer protection",
        ],
        "reasoning": "Multiple red flags detected including urgent language and prepayment demands.",
        "priceAnalysis": {"isPriceNormal": False, "priceComment": "Too cheap for this photocard"},
        "translatedText": None,
    }


@pytest.fixture
def seller_output():
    return {
        "trustScore": 72,
        "trustLevel": "high",
        "strengths": ["Account is over two years old", "Consistent trading posts"],
        "concerns": [],
        "recommendations": ["Ask for a timestamp photo before paying"],
        "reasoning": "The account has a long, consistent history of merchandise trades and engagement.",
    }


@pytest.fixture
def image_output():
    return {
        "isAuthentic": False,
        "confidence": 80,
        "detectedIssues": ["stock_photo"],
        "observations": ["The photo matches the official promotional image"],
        "recommendations": ["Request a photo of the actual item with a timestamp"],
        "reasoning": "The image appears to be an official stock photo, not the item itself.",
    }


@pytest.fixture
def sample_listing_request():
    return {
        "url": "https://twitter.com/user/status/123",
        "text": "포토카드 양도합니다! 급해요! 선입금만 받아요",
        "price": 3000,
    }
