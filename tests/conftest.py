"""Pytest configuration and shared fixtures."""
import os

os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from decimal import Decimal
from unittest.mock import Mock
from fastapi.testclient import TestClient

from pricing_calculator.domain.basket import Basket, BasketEntry
from pricing_calculator.services.pricing import BasketCalculatorService


@pytest.fixture
def prices():
    """Unit prices known to the mocked price repository."""
    return {
        "article-1": Decimal("1.50"),
        "article-2": Decimal("0.58"),
        "article-3": Decimal("9.99"),
    }


@pytest.fixture
def discounts():
    """Discount factors known to the mocked discount repository."""
    return {"customer-1": Decimal("0.9")}


@pytest.fixture
def mock_price_repository(prices):
    """Price repository answering from the ``prices`` fixture."""
    repo = Mock(spec=["find_price_by_article_id"])
    repo.find_price_by_article_id.side_effect = prices.get
    return repo


@pytest.fixture
def mock_discount_repository(discounts):
    """Discount repository answering from the ``discounts`` fixture."""
    repo = Mock(spec=["find_discount_by_customer_id"])
    repo.find_discount_by_customer_id.side_effect = discounts.get
    return repo


@pytest.fixture
def service(mock_price_repository, mock_discount_repository):
    return BasketCalculatorService(mock_price_repository, mock_discount_repository)


@pytest.fixture
def make_basket():
    """Build a basket from (article_id, quantity) pairs."""
    def _make(customer_id, *entries):
        return Basket(
            customer_id=customer_id,
            entries=[BasketEntry(article_id=a, quantity=Decimal(str(q))) for a, q in entries]
        )
    return _make


@pytest.fixture
def fake_redis():
    """Dict-backed stand-in for a Redis client."""
    store = {}

    def _set(key, value, nx=False):
        if nx and key in store:
            return None
        store[key] = value
        return True

    client = Mock()
    client.store = store
    client.get.side_effect = store.get
    client.set.side_effect = _set
    client.delete.side_effect = lambda key: 1 if store.pop(key, None) is not None else 0
    client.ping.return_value = True
    return client


@pytest.fixture
def test_client():
    """FastAPI test client using the configured lookup tables."""
    from main import app
    return TestClient(app)


@pytest.fixture
def mocked_client(service):
    """FastAPI test client pricing with the mocked repositories."""
    from main import app
    from pricing_calculator.api.dependencies import get_basket_calculator

    app.dependency_overrides[get_basket_calculator] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()
