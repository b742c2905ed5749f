from __future__ import annotations

import unittest

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from carwash.core.config import settings
from carwash.db.base import Base
from carwash.db.session import get_db
from carwash.main import app
import carwash.models  # noqa: F401 - register models with Base.metadata


def memory_engine():
    """Single shared in-memory SQLite connection usable from the TestClient thread."""
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    return engine


class ApiTestCase(unittest.TestCase):
    password = settings.admin_password

    def setUp(self):
        self.engine = memory_engine()
        self.SessionTest = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

        def _get_test_db():
            db = self.SessionTest()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = _get_test_db
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()
        self.engine.dispose()

    def admin(self, **body) -> dict:
        return {"password": self.password, **body}

    def create_product(self, name: str = "Cera Automotriz", quantity: int = 5, **extra) -> dict:
        payload = self.admin(name=name, quantity=quantity, minQuantity=2, price=120, **extra)
        resp = self.client.post("/inventory", json=payload)
        self.assertEqual(resp.status_code, 200, resp.text)
        return resp.json()
