from config import settings
from routes import drafts as drafts_routes

BASE = "/shipment-drafts/current"


def _box(sku="PROD001", qty=1, short=False, dims=(10, 10, 10, 5)):
    length, height, width, weight = dims
    return {
        "isShortBox": short, "length": length, "height": height, "width": width, "weight": weight,
        "products": [{"sku": sku, "quantity": qty}],
    }


def _header(**overrides):
    header = {"invoiceNo": "inv-100", "customer": 1, "partyName": "Acme Traders",
              "requiredQty": 3, "startTime": "09:00", "endTime": "09:40"}
    header.update(overrides)
    return header


def test_empty_draft(client):
    res = client.get(BASE)
    assert res.status_code == 200
    body = res.json()
    assert body["state"] == "Empty"
    assert body["boxes"] == []
    assert body["totals"]["chargedWeight"] == 0


def test_add_boxes_and_read_totals(client):
    assert client.post(f"{BASE}/boxes", json=_box()).status_code == 201
    res = client.post(f"{BASE}/boxes", json=_box(qty=2, dims=(50, 50, 50, 1)))
    assert res.status_code == 201

    body = client.get(BASE, params={"required_qty": 3}).json()
    assert body["state"] == "HasBoxes"
    assert [b["boxNo"] for b in body["boxes"]] == ["1", "2"]
    assert body["boxes"][1]["volumeWeight"] == 27.78
    assert body["totals"]["chargedWeight"] == 28.0
    assert body["quantityCheck"]["matches"] is True


def test_rejected_box_returns_error_kind(client):
    res = client.post(f"{BASE}/boxes", json=_box(sku="NOPE"))
    assert res.status_code == 400
    assert res.json()["detail"]["kind"] == "UnknownSku"

    res = client.post(f"{BASE}/boxes", json=_box(dims=(10, 10, 0, 5)))
    assert res.status_code == 400
    assert res.json()["detail"]["fields"] == ["width"]


def test_duplicate_short_box(client):
    client.post(f"{BASE}/boxes", json=_box(short=True))
    res = client.post(f"{BASE}/boxes", json=_box(short=True))
    assert res.status_code == 400
    assert res.json()["detail"]["kind"] == "DuplicateShortBox"
    assert len(client.get(BASE).json()["boxes"]) == 1


def test_copy_remove_and_renumber(client):
    first = client.post(f"{BASE}/boxes", json=_box()).json()["boxes"][0]["id"]
    client.post(f"{BASE}/boxes", json=_box(qty=2))
    body = client.post(f"{BASE}/boxes/{first}/copy").json()
    assert [b["boxNo"] for b in body["boxes"]] == ["1", "2", "3"]
    second = body["boxes"][1]["id"]

    body = client.delete(f"{BASE}/boxes/{second}").json()
    assert [b["boxNo"] for b in body["boxes"]] == ["1", "2"]
    assert body["totals"]["totalPieces"] == 2

    assert client.delete(f"{BASE}/boxes/unknown").status_code == 404


def test_edit_box_and_lines(client):
    box_id = client.post(f"{BASE}/boxes", json=_box()).json()["boxes"][0]["id"]

    body = client.put(f"{BASE}/boxes/{box_id}", json={"weight": 12}).json()
    assert body["boxes"][0]["finalWeight"] == 12

    body = client.post(f"{BASE}/boxes/{box_id}/products", json={"sku": "prod002", "quantity": 3}).json()
    lines = body["boxes"][0]["products"]
    assert [l["sku"] for l in lines] == ["PROD001", "PROD002"]

    res = client.delete(f"{BASE}/boxes/{box_id}/products/{lines[1]['id']}")
    assert res.status_code == 200
    res = client.delete(f"{BASE}/boxes/{box_id}/products/{lines[0]['id']}")
    assert res.status_code == 400
    assert res.json()["detail"]["kind"] == "EmptyBox"


def test_drafts_are_scoped_per_user(client, login_as):
    client.post(f"{BASE}/boxes", json=_box())
    login_as("OPERATOR")
    assert client.get(BASE).json()["state"] == "Empty"


def test_rapid_second_removal_is_refused(client, monkeypatch):
    monkeypatch.setattr(settings, "DRAFT_REMOVAL_COOLDOWN_MS", 60_000)
    drafts_routes._guards.clear()
    ids = [client.post(f"{BASE}/boxes", json=_box()).json()["boxes"][-1]["id"] for _ in range(3)]

    assert client.delete(f"{BASE}/boxes/{ids[0]}").status_code == 200
    res = client.delete(f"{BASE}/boxes/{ids[1]}")
    assert res.status_code == 409
    assert res.json()["detail"]["kind"] == "RemovalInProgress"
    assert len(client.get(BASE).json()["boxes"]) == 2


def test_submit_with_unknown_customer_keeps_draft(client):
    client.post(f"{BASE}/boxes", json=_box())
    res = client.post(f"{BASE}/submit", json=_header(customer=None, partyName="Walk-in Buyer"))
    assert res.status_code == 400
    assert res.json()["detail"]["kind"] == "UnknownCustomer"
    assert client.get(BASE).json()["state"] == "HasBoxes"


def test_submit_persists_shipment_and_clears_draft(client):
    client.post(f"{BASE}/boxes", json=_box(qty=1))
    client.post(f"{BASE}/boxes", json=_box(qty=1, dims=(50, 50, 50, 1)))

    res = client.post(f"{BASE}/submit", json=_header())
    assert res.status_code == 201
    body = res.json()
    shipment = body["shipment"]
    assert shipment["invoiceNo"] == "INV-100"
    assert shipment["customer"] == 1
    assert shipment["totals"]["chargedWeight"] == 28.0
    assert body["quantityCheck"]["matches"] is False
    assert body["quantityCheck"]["difference"] == -1

    assert client.get(BASE).json()["state"] == "Empty"
    assert client.get(f"/shipments/{shipment['id']}").json()["invoiceNo"] == "INV-100"


def test_duplicate_invoice_on_submit_keeps_draft(client):
    client.post(f"{BASE}/boxes", json=_box())
    assert client.post(f"{BASE}/submit", json=_header()).status_code == 201

    client.post(f"{BASE}/boxes", json=_box())
    res = client.post(f"{BASE}/submit", json=_header(invoiceNo="INV-100"))
    assert res.status_code == 409
    assert res.json()["detail"]["kind"] == "DuplicateInvoice"
    assert client.get(BASE).json()["state"] == "HasBoxes"


def test_discard(client):
    client.post(f"{BASE}/boxes", json=_box())
    assert client.delete(BASE).status_code == 200
    assert client.get(BASE).json()["state"] == "Empty"


def test_edit_with_null_fields_keeps_box(client):
    box_id = client.post(f"{BASE}/boxes", json=_box(qty=2)).json()["boxes"][0]["id"]

    for patch in ({"products": None}, {"isShortBox": None}):
        res = client.put(f"{BASE}/boxes/{box_id}", json=patch)
        assert res.status_code == 200, res.text
        box = res.json()["boxes"][0]
        assert box["isShortBox"] is False
        assert [l["quantity"] for l in box["products"]] == [2]


def test_submit_rejects_party_name_of_another_customer(client):
    client.post(f"{BASE}/boxes", json=_box())
    res = client.post(f"{BASE}/submit", json=_header(partyName="Free Typed Nobody"))
    assert res.status_code == 400
    assert res.json()["detail"]["kind"] == "UnknownCustomer"
    assert client.get(BASE).json()["state"] == "HasBoxes"
    assert client.get("/shipments").json()["total"] == 0


def test_submit_accepts_customer_object_or_code(client):
    client.post(f"{BASE}/boxes", json=_box())
    res = client.post(f"{BASE}/submit", json=_header(customer={"_id": 1}))
    assert res.status_code == 201, res.text
    assert res.json()["shipment"]["customer"] == 1

    client.post(f"{BASE}/boxes", json=_box())
    res = client.post(f"{BASE}/submit", json=_header(invoiceNo="inv-101", customer="cust002",
                                                     partyName="Northwind Imports"))
    assert res.status_code == 201, res.text
    assert res.json()["shipment"]["customer"] == 2
