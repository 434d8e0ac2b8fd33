"""HTTP surface tests through the Flask test client."""

import logging


def _create_item(client, **overrides):
    payload = {"name": "Tea", "price_cents": 2000, "cost_per_unit_cents": 1000, "stock_type": "unlimited"}
    payload.update(overrides)
    response = client.post("/api/items", json=payload)
    assert response.status_code == 201, response.get_json()
    return response.get_json()["item"]


def _create_employee(client, username="cook", mode="manual"):
    response = client.post("/api/employees", json={"username": username, "confirmation_mode": mode})
    assert response.status_code == 201, response.get_json()
    return response.get_json()["employee"]


def test_health(client, db_session):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.get_json()["database"]["status"] == "healthy"


def test_item_validation_errors(client, db_session):
    response = client.post("/api/items", json={"name": "Tea", "price_cents": 10.5, "stock_type": "unlimited"})
    assert response.status_code == 400

    response = client.post("/api/items", json={"name": "Samosa", "price_cents": 1000, "stock_type": "fixed"})
    assert response.status_code == 400
    assert "stock_qty" in response.get_json()["error"]

    response = client.post("/api/items", json={"name": "Tea", "price_cents": 100, "stock_type": "bulk"})
    assert response.status_code == 400


def test_unknown_item_is_404(client, db_session):
    response = client.get("/api/items/4040")
    assert response.status_code == 404
    assert response.get_json()["details"] == {"item_id": 4040}


def test_checkout_queue_and_mark_done(client, db_session):
    cook = _create_employee(client)
    item = _create_item(client, assigned_employee_id=cook["id"])

    response = client.post("/api/sales", json={
        "items": [{"item_id": item["id"], "qty": 2}],
        "payment_method": "cash",
    })
    assert response.status_code == 201
    sale = response.get_json()["sale"]
    assert sale["token_number"] == 1
    assert sale["total_amount_cents"] == 4000
    assert sale["total_cost_cents"] == 2000
    assert sale["status"] == "pending"

    queue = client.get(f"/api/queues/employees/{cook['id']}").get_json()
    assert [o["sale_id"] for o in queue["pending"]] == [sale["id"]]

    response = client.post(f"/api/sales/{sale['id']}/items/{item['id']}/done")
    assert response.status_code == 200
    assert response.get_json()["sale"]["status"] == "done"

    queue = client.get(f"/api/queues/employees/{cook['id']}").get_json()
    assert queue["pending"] == []
    assert [o["sale_id"] for o in queue["completed"]] == [sale["id"]]

    server = client.get("/api/queues/server").get_json()
    assert [o["sale_id"] for o in server["completed"]] == [sale["id"]]


def test_checkout_errors(client, db_session):
    response = client.post("/api/sales", json={"items": [], "payment_method": "cash"})
    assert response.status_code == 400
    assert response.get_json()["error"] == "Cart is empty"

    item = _create_item(client)
    response = client.post("/api/sales", json={
        "items": [{"item_id": item["id"], "qty": 1}],
        "payment_method": "credit",
    })
    assert response.status_code == 400

    response = client.post("/api/sales", json={"items": [{"item_id": 999, "qty": 1}]})
    assert response.status_code == 404


def test_queue_for_unknown_employee_is_404(client, db_session):
    assert client.get("/api/queues/employees/321").status_code == 404


def test_credit_settlement_flow(client, db_session):
    item = _create_item(client)
    for _ in range(2):
        client.post("/api/sales", json={
            "items": [{"item_id": item["id"], "qty": 1}],
            "payment_method": "credit",
            "credit_customer_name": "Ravi",
        })

    summary = client.get("/api/reports/sales-summary").get_json()
    assert summary["credit_by_customer"][0]["amount_cents"] == 4000

    response = client.post("/api/sales/credit/settle", json={"customer_name": "Ravi", "payment_method": "upi"})
    assert response.status_code == 200
    assert response.get_json()["settled"] == 2

    summary = client.get("/api/reports/sales-summary").get_json()
    assert summary["credit_by_customer"] == []
    assert summary["payment_breakdown_cents"]["upi"] == 4000


def test_costs_created_then_merged(client, db_session):
    x = _create_item(client, name="Orange Juice", price_cents=1000)
    y = _create_item(client, name="Lime Juice", price_cents=800)

    response = client.post("/api/costs", json={
        "cost_type": "combined",
        "item_ids": [x["id"], y["id"]],
        "total_cost_cents": 10000,
        "common_name": "Juice",
    })
    assert response.status_code == 201
    assert response.get_json()["result"] == "created"

    response = client.post("/api/costs", json={
        "cost_type": "individual",
        "item_ids": [x["id"]],
        "total_cost_cents": 500,
        "description": "Ice",
    })
    assert response.status_code == 200
    body = response.get_json()
    assert body["result"] == "merged"
    assert body["added_cents"] == 500
    assert body["cost_entry"]["total_cost_cents"] == 10500

    entries = client.get("/api/costs").get_json()["cost_entries"]
    assert len(entries) == 1


def test_combined_conflict_is_400(client, db_session):
    x = _create_item(client, name="X")
    y = _create_item(client, name="Y")
    client.post("/api/costs", json={"cost_type": "individual", "item_ids": [x["id"]], "total_cost_cents": 100})

    response = client.post("/api/costs", json={
        "cost_type": "combined",
        "item_ids": [x["id"], y["id"]],
        "total_cost_cents": 500,
        "common_name": "Mix",
    })

    assert response.status_code == 400
    assert response.get_json()["details"]["item_ids"] == [x["id"]]


def test_profit_loss_report(client, db_session):
    x = _create_item(client, name="Orange Juice", price_cents=1000)
    y = _create_item(client, name="Lime Juice", price_cents=800)
    client.post("/api/costs", json={
        "cost_type": "combined",
        "item_ids": [x["id"], y["id"]],
        "total_cost_cents": 10000,
        "common_name": "Juice",
    })
    client.post("/api/sales", json={"items": [
        {"item_id": x["id"], "qty": 5},
        {"item_id": y["id"], "qty": 3},
    ]})

    report = client.get("/api/reports/profit-loss").get_json()

    assert len(report["rows"]) == 1
    row = report["rows"][0]
    assert row["name"] == "Juice"
    assert row["qty_sold"] == 8
    assert row["revenue_cents"] == 7400
    assert row["profit_cents"] == -2600
    assert report["total_profit_cents"] == -2600


def test_report_date_range_validation(client, db_session):
    assert client.get("/api/reports/profit-loss?date_from=2024-13-01").status_code == 400
    assert client.get("/api/reports/profit-loss?date_from=2024-05-02&date_to=2024-05-01").status_code == 400


def test_dashboard(client, db_session):
    _create_item(client, name="Samosa", stock_type="fixed", stock_qty=3)
    board = client.get("/api/reports/dashboard").get_json()
    assert board["total_items"] == 1
    assert board["low_stock_items"][0]["name"] == "Samosa"


def test_stock_logs_endpoint(client, db_session):
    item = _create_item(client, name="Samosa", stock_type="fixed", stock_qty=10)
    client.post("/api/sales", json={"items": [{"item_id": item["id"], "qty": 4}]})

    logs = client.get(f"/api/stock-logs?item_id={item['id']}").get_json()["stock_logs"]

    assert sorted((log["reason"], log["change"]) for log in logs) == [("initial", 10), ("sale", -4)]


def test_cost_update_with_non_string_name_is_400(client, db_session):
    x = _create_item(client, name="X")
    y = _create_item(client, name="Y")
    entry = client.post("/api/costs", json={
        "cost_type": "combined",
        "item_ids": [x["id"], y["id"]],
        "total_cost_cents": 500,
        "common_name": "Mix",
    }).get_json()["cost_entry"]

    response = client.put(f"/api/costs/{entry['id']}", json={
        "cost_type": "combined",
        "item_ids": [x["id"], y["id"]],
        "total_cost_cents": 500,
        "common_name": 5,
    })

    assert response.status_code == 400
    assert "common_name" in response.get_json()["error"]


def test_switching_item_to_fixed_without_qty_is_400(client, db_session):
    item = _create_item(client)
    response = client.put(f"/api/items/{item['id']}", json={"stock_type": "fixed"})
    assert response.status_code == 400
    assert client.get(f"/api/items/{item['id']}").get_json()["item"]["stock_type"] == "unlimited"


def test_not_found_errors_are_logged(client, db_session, caplog):
    caplog.set_level(logging.INFO, logger="stallpos")

    assert client.get("/api/sales/777").status_code == 404
    assert client.delete("/api/costs/778").status_code == 404

    messages = [record.getMessage() for record in caplog.records if record.levelno == logging.INFO]
    assert any("/api/sales/777" in m and "404" in m for m in messages)
    assert any("/api/costs/778" in m and "404" in m for m in messages)
