def _box(qty=1, short=False, dims=(10, 10, 10, 5)):
    length, height, width, weight = dims
    return {
        "isShortBox": short, "length": length, "height": height, "width": width, "weight": weight,
        "products": [{"sku": "PROD001", "quantity": qty}],
    }


def _ship(client, invoice, party, day, start=None, end=None, boxes=None, customer=1):
    res = client.post("/shipments", json={
        "invoiceNo": invoice, "customer": customer, "partyName": party, "date": day,
        "requiredQty": 1, "startTime": start, "endTime": end, "boxes": boxes or [_box()],
    })
    assert res.status_code == 201, res.text


def _seed_shipments(client):
    _ship(client, "INV-1", "Acme Traders", "2026-03-02", "09:00", "09:30")
    _ship(client, "INV-2", "ACME Traders", "2026-03-05", "10:00", "11:00", [_box(dims=(50, 50, 50, 1))])
    _ship(client, "INV-3", "Northwind Imports", "2026-03-20", boxes=[_box(), _box(short=True)], customer=2)
    _ship(client, "INV-4", "Acme Traders", "2026-04-15")


def test_summary_groups_by_party_name(client):
    _seed_shipments(client)
    res = client.get("/reports/summary", params={"start_date": "2026-03-01", "end_date": "2026-03-31"})
    assert res.status_code == 200
    body = res.json()

    assert body["totalShipments"] == 3
    assert body["totalBoxes"] == 4
    assert body["totalWeight"] == 37.78
    assert body["avgDurationMinutes"] == 45.0
    names = [c["partyName"] for c in body["customers"]]
    assert names == ["ACME Traders", "Acme Traders", "Northwind Imports"]
    northwind = body["customers"][2]
    assert northwind["boxes"] == 2
    assert northwind["totalDurationMinutes"] == 0


def test_summary_without_range_covers_everything(client):
    _seed_shipments(client)
    assert client.get("/reports/summary").json()["totalShipments"] == 4


def test_summary_rejects_inverted_range(client):
    res = client.get("/reports/summary", params={"start_date": "2026-04-01", "end_date": "2026-03-01"})
    assert res.status_code == 400


def test_party_drill_down(client):
    _seed_shipments(client)
    res = client.get("/reports/customers/Acme Traders")
    assert res.status_code == 200
    body = res.json()
    assert [s["invoiceNo"] for s in body["shipments"]] == ["INV-1", "INV-4"]
    assert body["shipments"][0]["durationMinutes"] == 30
    assert body["shipments"][1]["durationMinutes"] is None
    assert body["stats"]["shipments"] == 2
    assert body["stats"]["totalWeight"] == 10.0

    assert client.get("/reports/customers/Nobody").status_code == 404


def test_reports_need_manager_or_admin(client, login_as):
    login_as("OPERATOR")
    assert client.get("/reports/summary").status_code == 403
