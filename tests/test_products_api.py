from pathlib import Path

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from restopos import main as main_module
from restopos.core.config import settings
from restopos.db import session as db_session
from restopos.db.base import Base
from restopos.main import app


def _prepare_db(tmp_path: Path, monkeypatch) -> None:
    engine = create_engine(f"sqlite:///{tmp_path / 'products.db'}", connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    monkeypatch.setattr(db_session, "engine", engine)
    monkeypatch.setattr(db_session, "SessionLocal", sessionmaker(autocommit=False, autoflush=False, bind=engine))
    monkeypatch.setattr(main_module, "engine", engine)
    monkeypatch.setattr(settings, "bill_reaper_enabled", False)


def _owner_headers(client: TestClient, email: str) -> tuple[int, dict[str, str]]:
    business = client.post(
        "/api/v1/auth/business/register",
        json={"businessName": email.split("@")[1], "email": email, "password": "secret123"},
    ).json()
    login = client.post("/api/v1/auth/business/login", json={"email": email, "password": "secret123"})
    return business["businessId"], {"Authorization": f"Bearer {login.json()['access_token']}"}


def test_product_crud_with_recipe(tmp_path: Path, monkeypatch) -> None:
    _prepare_db(tmp_path, monkeypatch)

    with TestClient(app) as client:
        business_id, headers = _owner_headers(client, "owner@spice.test")
        created = client.post(
            "/api/v1/products",
            headers=headers,
            json={
                "name": "Masala Dosa",
                "price": 85.5,
                "productType": "veg",
                "category": "Breakfast",
                "images": ["https://img.test/dosa.png"],
                "recipe": [{"name": "batter", "quantity": 0.2}],
            },
        )
        product_id = created.json()["id"]
        updated = client.put(f"/api/v1/products/{product_id}", headers=headers, json={"price": 90, "isActive": False})
        menu = client.get("/api/v1/products", params={"businessId": business_id})
        fetched = client.get(f"/api/v1/products/{product_id}", headers=headers)

    assert created.status_code == 201
    assert created.json()["productType"] == "veg"
    assert updated.json()["price"] == 90.0
    assert updated.json()["isActive"] is False
    assert updated.json()["recipe"] == [{"name": "batter", "quantity": 0.2}]
    assert [product["name"] for product in menu.json()] == ["Masala Dosa"]
    assert fetched.json()["businessId"] == business_id


def test_recipe_entries_are_validated(tmp_path: Path, monkeypatch) -> None:
    _prepare_db(tmp_path, monkeypatch)

    with TestClient(app) as client:
        _, headers = _owner_headers(client, "owner@spice.test")
        negative = client.post(
            "/api/v1/products",
            headers=headers,
            json={"name": "Tea", "price": 10, "recipe": [{"name": "milk", "quantity": -1}]},
        )
        nameless = client.post(
            "/api/v1/products",
            headers=headers,
            json={"name": "Tea", "price": 10, "recipe": [{"name": "", "quantity": 1}]},
        )

    assert negative.status_code == 422
    assert nameless.status_code == 422


def test_products_of_other_business_are_hidden(tmp_path: Path, monkeypatch) -> None:
    _prepare_db(tmp_path, monkeypatch)

    with TestClient(app) as client:
        _, headers = _owner_headers(client, "owner@spice.test")
        _, other_headers = _owner_headers(client, "owner@other.test")
        product_id = client.post("/api/v1/products", headers=headers, json={"name": "Tea", "price": 10}).json()["id"]

        fetched = client.get(f"/api/v1/products/{product_id}", headers=other_headers)
        deleted = client.delete(f"/api/v1/products/{product_id}", headers=other_headers)

    assert fetched.status_code == 404
    assert deleted.status_code == 404


def test_bulk_delete_by_category(tmp_path: Path, monkeypatch) -> None:
    _prepare_db(tmp_path, monkeypatch)

    with TestClient(app) as client:
        business_id, headers = _owner_headers(client, "owner@spice.test")
        for name, category in (("Tea", "Drinks"), ("Coffee", "Drinks"), ("Idli", "Breakfast")):
            client.post("/api/v1/products", headers=headers, json={"name": name, "price": 10, "category": category})

        deleted = client.delete("/api/v1/products", headers=headers, params={"category": "Drinks"})
        missing = client.delete("/api/v1/products", headers=headers, params={"category": "Desserts"})
        single = client.delete("/api/v1/products/3", headers=headers)
        menu = client.get("/api/v1/products", params={"businessId": business_id})

    assert deleted.json() == {"message": "All dishes in category deleted"}
    assert missing.status_code == 404
    assert single.json() == {"message": "Product deleted successfully"}
    assert menu.json() == []


def test_update_rejects_null_for_required_fields(tmp_path: Path, monkeypatch) -> None:
    _prepare_db(tmp_path, monkeypatch)

    with TestClient(app) as client:
        _, headers = _owner_headers(client, "owner@spice.test")
        product_id = client.post("/api/v1/products", headers=headers, json={"name": "Tea", "price": 10}).json()["id"]

        null_price = client.put(f"/api/v1/products/{product_id}", headers=headers, json={"price": None})
        null_name = client.put(f"/api/v1/products/{product_id}", headers=headers, json={"name": None})
        cleared = client.put(f"/api/v1/products/{product_id}", headers=headers, json={"description": None})
        product = client.get(f"/api/v1/products/{product_id}", headers=headers)

    assert null_price.status_code == 422
    assert null_name.status_code == 422
    assert cleared.status_code == 200
    assert product.json()["name"] == "Tea"
    assert product.json()["price"] == 10.0
