from pathlib import Path

from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from restopos import main as main_module
from restopos.core.config import settings
from restopos.core.security import create_access_token
from restopos.db import session as db_session
from restopos.db.base import Base
from restopos.main import app


def _prepare_db(tmp_path: Path, monkeypatch) -> None:
    engine = create_engine(f"sqlite:///{tmp_path / 'auth.db'}", connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    monkeypatch.setattr(db_session, "engine", engine)
    monkeypatch.setattr(db_session, "SessionLocal", sessionmaker(autocommit=False, autoflush=False, bind=engine))
    monkeypatch.setattr(main_module, "engine", engine)
    monkeypatch.setattr(settings, "bill_reaper_enabled", False)


def test_business_register_login_and_me(tmp_path: Path, monkeypatch) -> None:
    _prepare_db(tmp_path, monkeypatch)

    with TestClient(app) as client:
        registered = client.post(
            "/api/v1/auth/business/register",
            json={"businessName": "Spice Route", "email": "Owner@Spice.test", "password": "secret123"},
        )
        duplicate = client.post(
            "/api/v1/auth/business/register",
            json={"businessName": "Again", "email": "owner@spice.test", "password": "secret123"},
        )
        login = client.post("/api/v1/auth/business/login", json={"email": "owner@spice.test", "password": "secret123"})
        wrong = client.post("/api/v1/auth/business/login", json={"email": "owner@spice.test", "password": "nope"})
        me = client.get("/api/v1/auth/business/me", headers={"Authorization": f"Bearer {login.json()['access_token']}"})

    assert registered.status_code == 201
    assert registered.json()["email"] == "owner@spice.test"
    assert duplicate.status_code == 400
    assert wrong.status_code == 401
    claims = jwt.decode(login.json()["access_token"], settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    assert claims["kind"] == "business_owner"
    assert claims["business_id"] == registered.json()["businessId"]
    assert me.json()["id"] == registered.json()["id"]


def test_customer_token_is_rejected_for_business_endpoints(tmp_path: Path, monkeypatch) -> None:
    _prepare_db(tmp_path, monkeypatch)

    with TestClient(app) as client:
        business_id = client.post(
            "/api/v1/auth/business/register",
            json={"businessName": "Spice Route", "email": "owner@spice.test", "password": "secret123"},
        ).json()["businessId"]
        customer = client.post(
            "/api/v1/auth/customer/register",
            json={"businessId": business_id, "name": "Asha", "email": "asha@example.com", "password": "secret123"},
        )
        unknown_business = client.post(
            "/api/v1/auth/customer/register",
            json={"businessId": 999, "name": "Ravi", "email": "ravi@example.com", "password": "secret123"},
        )
        login = client.post("/api/v1/auth/customer/login", json={"email": "asha@example.com", "password": "secret123"})
        customer_headers = {"Authorization": f"Bearer {login.json()['access_token']}"}

        as_owner = client.get("/api/v1/auth/business/me", headers=customer_headers)
        orders = client.get("/api/v1/orders", headers=customer_headers)
        as_customer = client.get("/api/v1/auth/customer/me", headers=customer_headers)

    assert customer.status_code == 201
    assert customer.json()["points"] == 0
    assert unknown_business.status_code == 404
    assert as_owner.status_code == 401
    assert orders.status_code == 401
    assert as_customer.json()["name"] == "Asha"


def test_garbage_and_expired_tokens_are_unauthorized(tmp_path: Path, monkeypatch) -> None:
    _prepare_db(tmp_path, monkeypatch)
    monkeypatch.setattr(settings, "jwt_expire_minutes", -1)
    expired = create_access_token({"sub": "1", "kind": "business_owner", "business_id": 1})

    with TestClient(app) as client:
        garbage = client.get("/api/v1/auth/business/me", headers={"Authorization": "Bearer garbage"})
        stale = client.get("/api/v1/auth/business/me", headers={"Authorization": f"Bearer {expired}"})
        missing = client.get("/api/v1/auth/business/me")

    assert garbage.status_code == 401
    assert stale.status_code == 401
    assert missing.status_code == 401
