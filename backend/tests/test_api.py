from hisab.main import app


def add(client, name, price, qty):
    r = client.post("/api/products", json={"name": name, "sale_price": price, "quantity": qty})
    assert r.status_code == 200, r.text
    return r.json()["id"]


def test_product_crud(client):
    pid = add(client, "Soap", 2.5, 100)
    r = client.get(f"/api/products/{pid}")
    assert r.json()["sale_price"] == 2.5

    r = client.put(f"/api/products/{pid}", json={"name": "Soap bar", "sale_price": "2.75", "quantity": 90})
    assert r.json() == {"ok": True, "updated": True}
    assert client.get(f"/api/products/{pid}").json()["name"] == "Soap bar"

    assert client.put("/api/products/999", json={"name": "X", "sale_price": 1, "quantity": 1}).json()["updated"] is False
    assert client.delete(f"/api/products/{pid}").json()["deleted"] is True
    r = client.get(f"/api/products/{pid}")
    assert r.status_code == 404
    assert r.json()["detail"]["error"] == "NotFound"


def test_validation_error_reports_nothing_changed(client):
    r = client.post("/api/products", json={"name": " ", "sale_price": 1, "quantity": 1})
    assert r.status_code == 400
    assert r.json()["detail"] == {
        "error": "ValidationError",
        "message": "Product name must not be empty",
        "changed": False,
    }


def test_listing_falls_back_to_session_filters(client):
    add(client, "Soap", 2.5, 100)
    add(client, "Shampoo", 12, 4)
    add(client, "Sugar", 20, 50)

    r = client.get("/api/products", params={"minPrice": 10, "maxPrice": 20, "sortBy": "price", "sortOrder": "ASC"})
    assert [p["name"] for p in r.json()["items"]] == ["Shampoo", "Sugar"]

    assert client.patch("/api/filters", json={"searchText": "s", "maxStock": 60}).status_code == 200
    assert client.get("/api/filters").json()["searchText"] == "s"
    r = client.get("/api/products", params={"sortBy": "name", "sortOrder": "ASC"})
    assert [p["name"] for p in r.json()["items"]] == ["Shampoo", "Sugar"]
    assert r.json()["filters"]["maxStock"] == 60

    r = client.put("/api/filters", json={"sortBy": "quantity", "sortOrder": "DESC"})
    assert r.json()["searchText"] is None
    r = client.get("/api/products")
    assert [p["name"] for p in r.json()["items"]] == ["Soap", "Sugar", "Shampoo"]


def test_sale_draft_flow(client):
    pid = add(client, "Soap", 2.5, 100)

    r = client.post("/api/sale-draft/items", json={"product_id": pid, "qty": 6})
    assert r.status_code == 200
    r = client.post("/api/sale-draft/items", json={"product_id": pid, "qty": 4})
    body = r.json()
    assert body["items"][0]["quantity"] == 10
    assert body["total"] == 25.0

    r = client.post("/api/sale-draft/items", json={"product_id": pid, "qty": 91})
    assert r.status_code == 409
    assert client.get("/api/sale-draft").json()["items"][0]["quantity"] == 10

    r = client.post("/api/sale-draft/complete", json={"is_credit_sale": False})
    assert r.status_code == 200
    tid = r.json()["transaction_id"]
    assert client.get(f"/api/products/{pid}").json()["quantity"] == 90

    t = client.get(f"/api/transactions/{tid}").json()
    assert t["total_amount"] == 25.0
    assert t["is_credit_sale"] is False
    assert t["customer_id"] is None
    assert client.get("/api/sale-draft").json()["items"] == []


def test_empty_draft_and_abandon(client):
    pid = add(client, "Soap", 2.5, 100)
    r = client.post("/api/sale-draft/complete", json={})
    assert r.status_code == 400

    client.post("/api/sale-draft/items", json={"product_id": pid, "qty": 1})
    r = client.put(f"/api/sale-draft/items/{pid}", json={"qty": 3})
    assert r.json()["items"][0]["quantity"] == 3
    assert client.delete("/api/sale-draft").json()["discarded"] is True
    assert client.get("/api/sale-draft").json()["items"] == []
    assert client.get("/api/transactions").json() == []


def test_credit_sale_payment_and_delete(client):
    pid = add(client, "Soap", 2.5, 100)
    r = client.post("/api/transactions", json={
        "lines": [{"product_id": pid, "qty": 5}],
        "is_credit_sale": True,
        "customer_name": "Bob",
        "customer_phone": "555-0100",
    })
    assert r.status_code == 200
    tid = r.json()["transaction_id"]

    owing = client.get("/api/customers/with-balance").json()
    assert [(c["name"], c["outstanding_balance"]) for c in owing] == [("Bob", 12.5)]
    cid = owing[0]["id"]

    r = client.post(f"/api/customers/{cid}/payments", json={"amount": 5})
    assert r.json() == {"customer_id": cid, "outstanding_balance": 7.5, "overpaid": False}

    assert client.delete(f"/api/transactions/{tid}").json() == {"ok": True}
    assert client.get(f"/api/customers/{cid}").json()["outstanding_balance"] == -5.0
    assert client.get("/api/customers/with-balance").json() == []
    assert client.delete(f"/api/transactions/{tid}").status_code == 404


def test_credit_sale_needs_customer_name(client):
    pid = add(client, "Soap", 2.5, 100)
    r = client.post("/api/transactions", json={"lines": [{"product_id": pid, "qty": 1}], "is_credit_sale": True})
    assert r.status_code == 400
    assert r.json()["detail"]["changed"] is False


def test_customers_upsert_and_roster(client):
    a = client.post("/api/customers", json={"name": "Carol"}).json()["id"]
    assert client.post("/api/customers", json={"name": "Carol", "phone_number": "555"}).json()["id"] == a
    client.post("/api/customers", json={"name": "Alice"})
    assert [c["name"] for c in client.get("/api/customers").json()] == ["Alice", "Carol"]
    assert client.get(f"/api/customers/{a}").json()["phone_number"] == "555"
    assert client.post("/api/customers/999/payments", json={"amount": 1}).status_code == 404


def test_backup_endpoints(client):
    add(client, "Soap", 2.5, 100)
    doc = client.get("/api/backup/export").json()
    assert doc["version"] == "1.0"

    r = client.post("/api/backup/import", json={"products": []})
    assert r.status_code == 422
    assert r.json()["detail"]["error"] == "FormatError"

    assert client.post("/api/backup/clear", json={}).status_code == 400
    assert client.post("/api/backup/clear", json={"confirm": "DELETE EVERYTHING"}).json() == {"ok": True}
    assert client.get("/api/products").json()["items"] == []

    r = client.post("/api/backup/import", json=doc)
    assert r.json()["imported"] == {"products": 1, "customers": 0, "transactions": 0}
    assert [p["name"] for p in client.get("/api/products").json()["items"]] == ["Soap"]


def test_preferences_endpoints(client):
    assert client.get("/api/preferences").json() == {"autoBackup": False, "analyticsEnabled": True}
    r = client.patch("/api/preferences", json={"autoBackup": True})
    assert r.json() == {"autoBackup": True, "analyticsEnabled": True}


def test_bad_filter_patch_is_a_validation_error(client):
    client.patch("/api/filters", json={"searchText": "tea"})
    for bad in ({"sortBy": "bogus"}, {"minPrice": "cheap"}):
        r = client.patch("/api/filters", json=bad)
        assert r.status_code == 400
        assert r.json()["detail"]["error"] == "ValidationError"
        assert r.json()["detail"]["changed"] is False
    assert client.get("/api/filters").json()["searchText"] == "tea"


def test_draft_requests_without_lines_hold_no_state(client):
    drafts = app.state.sale_drafts
    for _ in range(5):
        client.cookies.clear()
        assert client.get("/api/sale-draft").json() == {"draft": None, "items": [], "total": 0.0}
        client.post("/api/sale-draft/complete", json={})
        client.delete("/api/sale-draft/items/1")
        client.put("/api/sale-draft/items/1", json={"qty": 1})
        client.post("/api/sale-draft/items", json={"product_id": 999, "qty": 1})
    assert len(drafts) == 0


def test_unknown_draft_cookie_gets_a_fresh_token(client):
    pid = add(client, "Soap", 2.5, 100)
    client.cookies.set("sale_draft", "picked-by-client")
    r = client.post("/api/sale-draft/items", json={"product_id": pid, "qty": 1})
    assert r.json()["draft"] != "picked-by-client"
    assert app.state.sale_drafts.get("picked-by-client") is None
