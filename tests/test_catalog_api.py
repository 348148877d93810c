def test_product_list_hides_inactive_by_default(client):
    page = client.get("/products").json()
    assert [p["sku"] for p in page["items"]] == ["PROD001", "PROD002"]
    assert page["total"] == 2

    page = client.get("/products", params={"active": False}).json()
    assert [p["sku"] for p in page["items"]] == ["OLD001"]

    page = client.get("/products", params={"search": "sample product 2"}).json()
    assert [p["sku"] for p in page["items"]] == ["PROD002"]


def test_create_product_normalises_sku(client):
    res = client.post("/products", json={"sku": " abc1 ", "product_name": "Cable", "category_id": 1})
    assert res.status_code == 201
    assert res.json()["sku"] == "ABC1"

    res = client.post("/products", json={"sku": "ABC1", "product_name": "Cable 2", "category_id": 1})
    assert res.status_code == 409

    res = client.post("/products", json={"sku": "X" * 21, "product_name": "Too long", "category_id": 1})
    assert res.status_code == 422

    res = client.post("/products", json={"sku": "NEW1", "product_name": "Orphan", "category_id": 99})
    assert res.status_code == 400


def test_operator_cannot_change_catalog(client, login_as):
    login_as("OPERATOR")
    res = client.post("/products", json={"sku": "OP1", "product_name": "Nope", "category_id": 1})
    assert res.status_code == 403
    assert client.get("/products").status_code == 200


def test_update_product(client):
    res = client.put("/products/1", json={"product_name": "Renamed"})
    assert res.status_code == 200
    assert res.json()["product_name"] == "Renamed"
    assert res.json()["sku"] == "PROD001"

    assert client.put("/products/1", json={"sku": "prod002"}).status_code == 409


def test_sku_lookup(client):
    res = client.get("/products/sku/prod001")
    assert res.status_code == 200
    assert res.json() == {"id": 1, "sku": "PROD001", "product_name": "Sample Product 1", "category_id": 1}

    assert client.get("/products/sku/missing").status_code == 404


def test_delete_is_soft(client, login_as):
    login_as("MANAGER")
    assert client.delete("/products/2").status_code == 403

    login_as("ADMIN")
    assert client.delete("/products/2").status_code == 200
    assert client.get("/products/2").json()["is_active"] is False
    assert client.get("/products/sku/PROD002").status_code == 200


def test_category_names_are_unique_per_super_category(client):
    other = client.post("/super-categories", json={"name": "Apparel"}).json()
    assert client.post("/super-categories", json={"name": "apparel"}).status_code == 409

    res = client.post("/categories", json={"name": "Accessories", "super_category_id": 1})
    assert res.status_code == 409

    res = client.post("/categories", json={"name": "Accessories", "super_category_id": other["id"]})
    assert res.status_code == 201
    assert res.json()["super_category"]["name"] == "Apparel"

    listing = client.get(f"/categories/super-category/{other['id']}").json()
    assert listing["total"] == 1
    assert client.get("/categories").json()["total"] == 2


def test_category_in_use_cannot_be_deleted(client):
    assert client.delete("/categories/1").status_code == 409
    assert client.delete("/super-categories/1").status_code == 409

    empty = client.post("/super-categories", json={"name": "Empty"}).json()
    assert client.delete(f"/super-categories/{empty['id']}").status_code == 200


def test_customer_crud(client):
    res = client.post("/customers", json={"code": " c100 ", "name": "Globex", "state_code": "ka"})
    assert res.status_code == 201
    created = res.json()
    assert created["code"] == "C100"
    assert created["state_code"] == "KA"

    assert client.post("/customers", json={"code": "C100", "name": "Dup"}).status_code == 409
    assert client.post("/customers", json={"code": "C-1", "name": "Bad"}).status_code == 422

    res = client.put(f"/customers/{created['id']}", json={"city": "Bengaluru"})
    assert res.json()["city"] == "Bengaluru"
    assert res.json()["name"] == "Globex"

    assert client.delete(f"/customers/{created['id']}").status_code == 200
    assert client.get(f"/customers/{created['id']}").status_code == 404


def test_customer_search_and_filters(client):
    page = client.get("/customers", params={"search": "mumbai"}).json()
    assert [c["code"] for c in page["items"]] == ["CUST001"]

    page = client.get("/customers", params={"region": "north"}).json()
    assert [c["code"] for c in page["items"]] == ["CUST002"]


def test_customer_resolve_by_code_or_id(client):
    assert client.get("/customers/resolve/cust002").json()["id"] == 2
    assert client.get("/customers/resolve/1").json()["code"] == "CUST001"
    assert client.get("/customers/resolve/NOBODY").status_code == 404
