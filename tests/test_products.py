import json

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import IntegrityError

from services.product_service.repository import ProductRepository

PNG = b"\x89PNG\r\n\x1a\n fake image bytes"


async def test_create_and_get_product(client, make_product):
    created = await make_product()

    assert created["id"] > 0
    assert created["name"] == "Mechanical Keyboard"
    assert created["price"] == 19.99
    assert created["stockQuantity"] == 5
    assert created["productAvailable"] is True
    assert created["releaseDate"] == "2024-03-01"
    assert created["imageName"] is None

    resp = await client.get(f"/api/product/{created['id']}")
    assert resp.status_code == 200
    assert resp.json() == created


async def test_list_products(client, make_product):
    await make_product(name="First")
    await make_product(name="Second")

    resp = await client.get("/api/products")
    assert resp.status_code == 200
    assert [p["name"] for p in resp.json()] == ["First", "Second"]


async def test_get_missing_product_is_404(client):
    resp = await client.get("/api/product/999")
    assert resp.status_code == 404


async def test_product_without_stock_is_stored_unavailable(make_product):
    created = await make_product(stockQuantity=0, productAvailable=True)
    assert created["productAvailable"] is False


async def test_invalid_product_part_is_400(client):
    resp = await client.post("/api/product", data={"product": json.dumps({"name": "No price"})})
    assert resp.status_code == 400

    resp = await client.post("/api/product", data={"product": "not json"})
    assert resp.status_code == 400


async def test_negative_price_rejected(client):
    body = {"name": "Broken", "price": "-1.00", "stockQuantity": 1}
    resp = await client.post("/api/product", data={"product": json.dumps(body)})
    assert resp.status_code == 400


async def test_negative_stock_rejected(client):
    body = {"name": "Broken", "price": "1.00", "stockQuantity": -4}
    resp = await client.post("/api/product", data={"product": json.dumps(body)})
    assert resp.status_code == 400


async def test_update_to_negative_stock_rejected(client, make_product):
    created = await make_product()
    body = {"name": "Broken", "price": "1.00", "stockQuantity": -1}

    resp = await client.put(f"/api/product/{created['id']}", data={"product": json.dumps(body)})
    assert resp.status_code == 400
    assert (await client.get(f"/api/product/{created['id']}")).json()["stockQuantity"] == 5


async def _failing_save(db, product):
    raise IntegrityError("INSERT INTO products", {}, Exception("constraint violated"))


async def test_create_store_failure_is_500(client, monkeypatch):
    monkeypatch.setattr(ProductRepository, "save_product", _failing_save)
    body = {"name": "Lamp", "price": "9.00", "stockQuantity": 1}

    resp = await client.post("/api/product", data={"product": json.dumps(body)})
    assert resp.status_code == 500
    assert resp.json()["detail"].startswith("Failed to create product")
    assert (await client.get("/api/products")).json() == []


async def test_update_store_failure_is_500(client, make_product, monkeypatch):
    created = await make_product()
    monkeypatch.setattr(ProductRepository, "save_product", _failing_save)
    body = {"name": "Renamed", "price": "9.00", "stockQuantity": 1}

    resp = await client.put(f"/api/product/{created['id']}", data={"product": json.dumps(body)})
    assert resp.status_code == 500
    assert (await client.get(f"/api/product/{created['id']}")).json()["name"] == "Mechanical Keyboard"


def test_lock_statement_locks_rows_in_id_order():
    sql = str(ProductRepository.lock_statement([7, 3, 7, 5]).compile(dialect=postgresql.dialect()))
    assert "FOR UPDATE" in sql
    assert "ORDER BY products.id" in sql


async def test_image_upload_and_download(client, make_product):
    created = await make_product(image=("front.png", PNG, "image/png"))
    assert created["imageName"] == "front.png"
    assert created["imageType"] == "image/png"
    assert "imageData" not in created

    resp = await client.get(f"/api/product/{created['id']}/image")
    assert resp.status_code == 200
    assert resp.content == PNG
    assert resp.headers["content-type"] == "image/png"


async def test_image_missing_is_404(client, make_product):
    created = await make_product()

    resp = await client.get(f"/api/product/{created['id']}/image")
    assert resp.status_code == 404

    resp = await client.get("/api/product/999/image")
    assert resp.status_code == 404


async def test_update_without_image_keeps_stored_image(client, make_product):
    created = await make_product(image=("front.png", PNG, "image/png"))
    body = {"name": "Renamed", "price": "25.00", "stockQuantity": 7, "productAvailable": True}

    resp = await client.put(f"/api/product/{created['id']}", data={"product": json.dumps(body)})
    assert resp.status_code == 200
    updated = resp.json()
    assert updated["name"] == "Renamed"
    assert updated["price"] == 25.0
    assert updated["stockQuantity"] == 7
    assert updated["imageName"] == "front.png"

    resp = await client.get(f"/api/product/{created['id']}/image")
    assert resp.content == PNG


async def test_update_with_image_replaces_it(client, make_product):
    created = await make_product(image=("front.png", PNG, "image/png"))
    body = {"name": "Renamed", "price": "25.00", "stockQuantity": 7}

    resp = await client.put(
        f"/api/product/{created['id']}",
        data={"product": json.dumps(body)},
        files={"imageFile": ("back.jpg", b"jpeg bytes", "image/jpeg")},
    )
    assert resp.status_code == 200
    assert resp.json()["imageType"] == "image/jpeg"

    resp = await client.get(f"/api/product/{created['id']}/image")
    assert resp.content == b"jpeg bytes"


async def test_update_missing_product_is_404(client):
    body = {"name": "Ghost", "price": "1.00"}
    resp = await client.put("/api/product/999", data={"product": json.dumps(body)})
    assert resp.status_code == 404


async def test_delete_product(client, make_product):
    created = await make_product()

    resp = await client.delete(f"/api/product/{created['id']}")
    assert resp.status_code == 200

    resp = await client.get(f"/api/product/{created['id']}")
    assert resp.status_code == 404


async def test_delete_missing_product_fails_without_crashing(client):
    resp = await client.delete("/api/product/999")
    assert resp.status_code == 500
    assert "not found" in resp.json()["detail"]


async def test_delete_ordered_product_is_blocked(client, make_product):
    created = await make_product()
    order = {
        "customerName": "Ada",
        "email": "ada@example.com",
        "items": [{"productId": created["id"], "quantity": 1}],
    }
    assert (await client.post("/api/orders/place", json=order)).status_code == 201

    resp = await client.delete(f"/api/product/{created['id']}")
    assert resp.status_code == 500

    resp = await client.get(f"/api/product/{created['id']}")
    assert resp.status_code == 200


@pytest.mark.parametrize(
    "keyword",
    ["keyboard", "BROWN SWITCHES", "peripher", "keychron"],
)
async def test_search_matches_any_text_field(client, make_product, keyword):
    created = await make_product()
    await make_product(
        name="Desk Lamp", description="Warm light", brand="Lumen", category="Lighting"
    )

    resp = await client.get("/api/products/search", params={"keyword": keyword})
    assert resp.status_code == 200
    assert [p["id"] for p in resp.json()] == [created["id"]]


async def test_search_without_match_is_empty(client, make_product):
    await make_product()

    resp = await client.get("/api/products/search", params={"keyword": "espresso"})
    assert resp.status_code == 200
    assert resp.json() == []


async def test_search_treats_wildcards_literally(client, make_product):
    await make_product()

    resp = await client.get("/api/products/search", params={"keyword": "%"})
    assert resp.json() == []


async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "running"
