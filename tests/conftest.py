"""Pytest fixtures for testing"""

import pytest
from datetime import date
from fastapi.testclient import TestClient
from credit_optimizer.api.main import create_app
from credit_optimizer.domain.models import Card


# Monday; every date in the tests is resolved against this instead of today
REFERENCE_DATE = date(2024, 1, 1)


@pytest.fixture
def client() -> TestClient:
    """Create FastAPI test client"""
    app = create_app()
    return TestClient(app)


@pytest.fixture
def reference_date() -> date:
    return REFERENCE_DATE


@pytest.fixture
def standard_card() -> Card:
    """$10k limit, $5k balance (50%), statement on the 15th, due on the 10th"""
    return Card(
        card_id="card-std",
        name="Standard Card",
        credit_limit=10000,
        current_balance=5000,
        statement_day=15,
        due_day=10,
    )


@pytest.fixture
def portfolio() -> list[Card]:
    """
    Three cards: 33k total limit, 15k total balance (45.45% overall).

    Statements from 2024-01-01: card-c on the 5th, card-a on the 15th, card-b on the 20th.
    """
    return [
        Card(
            card_id="card-a",
            name="Sapphire",
            credit_limit=10000,
            current_balance=5000,  # 50%
            statement_day=15,
            due_day=10,
            apr=24.99,
        ),
        Card(
            card_id="card-b",
            name="Freedom",
            credit_limit=15000,
            current_balance=9000,  # 60%
            statement_day=20,
            due_day=15,
            apr=19.99,
        ),
        Card(
            card_id="card-c",
            name="Discover",
            credit_limit=8000,
            current_balance=1000,  # 12.5%
            statement_day=5,
            due_day=28,
        ),
    ]


@pytest.fixture
def portfolio_payload(portfolio: list[Card]) -> list[dict]:
    """Same portfolio as JSON request cards"""
    return [
        {
            "card_id": card.card_id,
            "name": card.name,
            "credit_limit": card.credit_limit,
            "current_balance": card.current_balance,
            "statement_day": card.statement_day,
            "due_day": card.due_day,
            "apr": card.apr,
        }
        for card in portfolio
    ]
