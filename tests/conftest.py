"""
This module contains pytest fixtures and configuration for testing.
"""
import os
import sys
import tempfile
from decimal import Decimal
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Settings are read at import time, so they must be in place before the app loads
_scratch = tempfile.mkdtemp(prefix="gev_api_tests_")
os.environ["DATABASE_URL"] = f"sqlite:///{Path(_scratch) / 'import.db'}"
os.environ["UPLOAD_DIR"] = str(Path(_scratch) / "uploads")
os.environ["CACHE_ENABLED"] = "false"
os.environ["IMAGE_STORAGE"] = "local"

# Add the project's root directory to the system path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

# Import the main app
from main import app  # noqa: E402

from gev_api.common.database import get_session, init_db, make_engine, make_session_factory  # noqa: E402
from gev_api.customers.repository import CustomerRepository  # noqa: E402
from gev_api.products.repository import ProductRepository  # noqa: E402
from gev_api.products.schemas import ProductCreate  # noqa: E402
from gev_api.products.services import create_product  # noqa: E402
from gev_api.sales.repository import SaleRepository  # noqa: E402


@pytest.fixture
def engine(tmp_path):
    """
    A fresh SQLite database file per test, with every table created.
    """
    engine = make_engine(f"sqlite:///{tmp_path / 'gev_test.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def repos(db_session):
    """
    The catalog, customer and sale repositories sharing one session, as a request does.
    """
    return ProductRepository(db_session), CustomerRepository(db_session), SaleRepository(db_session)


@pytest.fixture
def test_app(session_factory):
    """
    The FastAPI application bound to the per-test database.
    """
    def override_get_session():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_session] = override_get_session
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(test_app):
    """
    Create a test client for the FastAPI application.
    """
    return TestClient(test_app)


@pytest.fixture
def make_product(db_session):
    """
    Factory creating catalog products directly through the service layer.
    """
    repo = ProductRepository(db_session)

    def _make(nome="Produto", preco_custo="10.00", preco_venda="15.00", estoque_atual=10, **kwargs):
        data = ProductCreate(
            nome=nome,
            preco_custo=Decimal(preco_custo),
            preco_venda=Decimal(preco_venda),
            estoque_atual=estoque_atual,
            **kwargs,
        )
        return create_product(repo, data)

    return _make
