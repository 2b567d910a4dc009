"""
Integration tests for bookings and payments.

Booking -> customer ledger -> commission, then receipts, reversals and
deal-value adjustments, all through the HTTP API.
"""

import pytest

from backend.app.models.project import Project
from backend.app.models.plot import Plot


async def add_booking_rule(client, boss_headers, **overrides):
    payload = {
        "name": "Booking 2%",
        "type": "percentage",
        "value": 2,
        "trigger_event": "deal_closed",
        "basis": "full_deal_value",
    }
    payload.update(overrides)
    response = await client.post("/v1/commission/rules", json=payload, headers=boss_headers)
    assert response.status_code == 201, response.text
    return response.json()


async def book(client, headers, project, plot, executive=None, **extra):
    payload = {
        "name": "Anil Kumar",
        "phone": "9800000001",
        "project_id": project.id,
        "plot_id": plot.id,
    }
    if executive is not None:
        payload["assigned_executive_id"] = executive.id
    payload.update(extra)
    return await client.post("/v1/customers", json=payload, headers=headers)


async def statement(client, headers, customer_id):
    response = await client.get(f"/v1/ledger/{customer_id}", params={"party_type": "customer"}, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()


@pytest.mark.asyncio
async def test_booking_posts_deal_and_accrues_commission(client, boss, executive, project, plots, headers_for):
    boss_headers = headers_for(boss)
    await add_booking_rule(client, boss_headers)

    response = await book(client, boss_headers, project, plots[0], executive)
    assert response.status_code == 201, response.text
    customer = response.json()

    assert customer["deal_value"] == 500000
    assert customer["paid_amount"] == 0
    assert customer["balance_amount"] == 500000

    ledger = await statement(client, boss_headers, customer["id"])
    assert ledger["party_name"] == "Anil Kumar"
    assert len(ledger["entries"]) == 1
    assert ledger["entries"][0]["debit"] == 500000
    assert ledger["entries"][0]["reference_type"] == "customer"
    assert ledger["totals"]["current_balance"] == 500000

    plots_response = await client.get(f"/v1/projects/{project.id}/plots", headers=boss_headers)
    statuses = {p["id"]: p["status"] for p in plots_response.json()}
    assert statuses[plots[0].id] == "sold"

    commission = await client.get(f"/v1/commission/executive/{executive.id}", headers=headers_for(executive))
    assert commission.status_code == 200
    assert commission.json()["summary"] == {"total_earned": 10000, "total_paid": 0, "balance": 10000}


@pytest.mark.asyncio
async def test_sold_rate_sets_deal_value(client, boss, project, plots, headers_for):
    response = await book(client, headers_for(boss), project, plots[0], size=1000, rate=450)

    assert response.status_code == 201
    assert response.json()["deal_value"] == 450000


@pytest.mark.asyncio
async def test_sold_plot_cannot_be_booked_again(client, boss, project, plots, headers_for):
    headers = headers_for(boss)
    first = await book(client, headers, project, plots[0])
    assert first.status_code == 201

    second = await book(client, headers, project, plots[0])

    assert second.status_code == 409
    body = second.json()
    assert body["success"] is False
    assert "already sold" in body["error"]
    assert body["error_code"] == "ERR_DOMAIN_001"


@pytest.mark.asyncio
async def test_plot_must_belong_to_project(client, boss, project, db_session, headers_for):
    other = Project(project_name="Palm Grove", project_code="PG", active=True)
    db_session.add(other)
    await db_session.flush()
    stray = Plot(project_id=other.id, plot_number="P-1", size=100, rate=100, active=True)
    db_session.add(stray)
    await db_session.commit()

    response = await book(client, headers_for(boss), project, stray)

    assert response.status_code == 400
    assert response.json()["error"] == "Plot does not belong to the selected project"


@pytest.mark.asyncio
async def test_unknown_plot_is_404(client, boss, project, headers_for):
    response = await client.post(
        "/v1/customers",
        json={"name": "X", "phone": "9800000009", "project_id": project.id, "plot_id": 999},
        headers=headers_for(boss)
    )

    assert response.status_code == 404
    assert response.json()["error_code"] == "ERR_NOT_FOUND_001"


@pytest.mark.asyncio
async def test_receipt_and_reversal_keep_customer_balance(client, boss, project, plots, headers_for):
    headers = headers_for(boss)
    customer = (await book(client, headers, project, plots[0])).json()

    receipt = await client.post("/v1/transactions", json={
        "customer_id": customer["id"],
        "amount": 100000,
        "payment_mode": "bank",
        "transaction_type": "Down payment",
        "reference_number": "UTR123",
    }, headers=headers)
    assert receipt.status_code == 201, receipt.text
    assert receipt.json()["balance_at_time"] == 400000

    current = (await client.get(f"/v1/customers/{customer['id']}", headers=headers)).json()
    assert current["paid_amount"] == 100000
    assert current["balance_amount"] == current["deal_value"] - current["paid_amount"]

    ledger = await statement(client, headers, customer["id"])
    assert ledger["entries"][-1]["credit"] == 100000
    assert ledger["totals"]["current_balance"] == 400000

    reversal = await client.delete(f"/v1/transactions/{receipt.json()['id']}", headers=headers)
    assert reversal.status_code == 200
    assert reversal.json()["active"] is False

    current = (await client.get(f"/v1/customers/{customer['id']}", headers=headers)).json()
    assert current["paid_amount"] == 0
    assert current["balance_amount"] == 500000

    ledger = await statement(client, headers, customer["id"])
    assert ledger["totals"]["current_balance"] == 500000
    assert len(ledger["entries"]) == 1

    again = await client.delete(f"/v1/transactions/{receipt.json()['id']}", headers=headers)
    assert again.status_code == 400


@pytest.mark.asyncio
async def test_refund_larger_than_paid_rejected(client, boss, project, plots, headers_for):
    headers = headers_for(boss)
    customer = (await book(client, headers, project, plots[0])).json()
    await client.post("/v1/transactions", json={
        "customer_id": customer["id"], "amount": 5000, "payment_mode": "cash"
    }, headers=headers)

    refund = await client.post("/v1/transactions", json={
        "customer_id": customer["id"], "amount": 6000, "payment_mode": "cash", "entry_type": "Payment"
    }, headers=headers)

    assert refund.status_code == 409
    assert "Refund exceeds" in refund.json()["error"]


@pytest.mark.asyncio
async def test_receipt_accrues_collection_commission(client, boss, executive, project, plots, headers_for):
    boss_headers = headers_for(boss)
    await add_booking_rule(
        client, boss_headers, name="Collection 1%", value=1,
        trigger_event="payment_received", basis="received_amount"
    )
    customer = (await book(client, boss_headers, project, plots[0], executive)).json()

    await client.post("/v1/transactions", json={
        "customer_id": customer["id"], "amount": 100000, "payment_mode": "upi"
    }, headers=boss_headers)

    ledger = (await client.get(f"/v1/commission/executive/{executive.id}", headers=boss_headers)).json()
    assert [e["amount"] for e in ledger["entries"]] == [950]


@pytest.mark.asyncio
async def test_deal_value_change_posts_adjustments(client, boss, project, plots, headers_for):
    headers = headers_for(boss)
    customer = (await book(client, headers, project, plots[0])).json()

    raised = await client.put(f"/v1/customers/{customer['id']}", json={"deal_value": 550000}, headers=headers)
    assert raised.status_code == 200
    assert raised.json()["balance_amount"] == 550000

    lowered = await client.put(f"/v1/customers/{customer['id']}", json={"rate": 520}, headers=headers)
    assert lowered.status_code == 200
    assert lowered.json()["deal_value"] == 520000

    ledger = await statement(client, headers, customer["id"])
    moves = [(e["debit"], e["credit"], e["reference_type"]) for e in ledger["entries"]]
    assert moves == [(500000, 0, "customer"), (50000, 0, "adjustment"), (0, 30000, "adjustment")]
    assert ledger["totals"]["current_balance"] == 520000


@pytest.mark.asyncio
async def test_plot_cannot_change_after_booking(client, boss, project, plots, headers_for):
    headers = headers_for(boss)
    customer = (await book(client, headers, project, plots[0])).json()

    response = await client.put(f"/v1/customers/{customer['id']}", json={"plot_id": plots[1].id}, headers=headers)

    assert response.status_code == 400
    assert response.json()["error"] == "Project and plot cannot be changed after booking"


@pytest.mark.asyncio
async def test_customer_shares_validated(client, boss, executive, head_executive, project, plots, headers_for):
    response = await book(
        client, headers_for(boss), project, plots[0],
        assigned_executives=[
            {"executive_id": executive.id, "percentage": 70},
            {"executive_id": head_executive.id, "percentage": 40},
        ]
    )

    assert response.status_code == 400
    assert "more than 100%" in response.json()["error"]


# Transaction history and cash book

async def pay_in(client, headers, customer_id, amount, mode="cash", **extra):
    payload = {"customer_id": customer_id, "amount": amount, "payment_mode": mode}
    payload.update(extra)
    response = await client.post("/v1/transactions", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


async def add_account(client, headers, name="Office Expenses"):
    response = await client.post("/v1/ledger-accounts", json={
        "account_name": name, "group": "INDIRECT EXPENSES"
    }, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_customer_transaction_history_keeps_snapshots(client, boss, project, plots, headers_for):
    headers = headers_for(boss)
    customer = (await book(client, headers, project, plots[0])).json()

    await pay_in(client, headers, customer["id"], 100000, mode="bank")
    await pay_in(client, headers, customer["id"], 50000)
    await pay_in(client, headers, customer["id"], 20000, entry_type="Payment")

    response = await client.get(f"/v1/customers/{customer['id']}/transactions", headers=headers)

    assert response.status_code == 200, response.text
    history = response.json()
    assert history["count"] == 3
    assert [t["balance_at_time"] for t in history["transactions"]] == [400000, 350000, 370000]
    assert history["total_paid"] == 130000
    assert history["account"]["name"] == "Anil Kumar"
    assert history["account"]["paid_amount"] == 130000
    assert history["account"]["balance_amount"] == 370000


@pytest.mark.asyncio
async def test_history_for_unknown_customer_is_404(client, boss, headers_for):
    response = await client.get("/v1/customers/999/transactions", headers=headers_for(boss))

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_cash_book_entries_post_to_ledger_account(client, boss, executive, project, plots, headers_for):
    headers = headers_for(boss)
    await add_booking_rule(
        client, headers, name="Collection 1%", value=1,
        trigger_event="payment_received", basis="received_amount"
    )
    account = await add_account(client, headers)

    receipt = await client.post("/v1/transactions", json={
        "account_type": "ledger_account", "ledger_account_id": account["id"],
        "amount": 2000, "payment_mode": "cash", "narration": "Scrap sale"
    }, headers=headers)
    assert receipt.status_code == 201, receipt.text
    assert receipt.json()["customer_id"] is None
    assert receipt.json()["balance_at_time"] == -2000

    payment = await client.post("/v1/transactions", json={
        "account_type": "ledger_account", "ledger_account_id": account["id"],
        "amount": 500, "payment_mode": "cash", "entry_type": "Payment"
    }, headers=headers)
    assert payment.json()["balance_at_time"] == -1500

    history = (await client.get(f"/v1/ledger-accounts/{account['id']}/transactions", headers=headers)).json()
    assert history["count"] == 2
    assert history["total_paid"] == 1500
    assert history["account"]["balance_amount"] == -1500

    commission = (await client.get(f"/v1/commission/executive/{executive.id}", headers=headers)).json()
    assert commission["entries"] == []

    reversal = await client.delete(f"/v1/transactions/{receipt.json()['id']}", headers=headers)
    assert reversal.status_code == 200
    ledger = (await client.get(f"/v1/ledger/{account['id']}", params={"party_type": "ledger_account"},
                               headers=headers)).json()
    assert ledger["totals"]["current_balance"] == 500


@pytest.mark.asyncio
async def test_transaction_needs_matching_account(client, boss, executive, headers_for):
    headers = headers_for(boss)

    no_account = await client.post("/v1/transactions", json={
        "account_type": "ledger_account", "amount": 100, "payment_mode": "cash"
    }, headers=headers)
    no_customer = await client.post("/v1/transactions", json={"amount": 100, "payment_mode": "cash"}, headers=headers)
    executive_account = await client.post("/v1/transactions", json={
        "account_type": "executive", "customer_id": executive.id, "amount": 100, "payment_mode": "cash"
    }, headers=headers)
    missing = await client.post("/v1/transactions", json={
        "account_type": "ledger_account", "ledger_account_id": 999, "amount": 100, "payment_mode": "cash"
    }, headers=headers)

    assert no_account.status_code == 400
    assert no_customer.status_code == 400
    assert executive_account.status_code == 400
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_transaction_list_filters_and_totals(client, boss, project, plots, headers_for):
    headers = headers_for(boss)
    customer = (await book(client, headers, project, plots[0])).json()
    account = await add_account(client, headers)

    bank = await pay_in(client, headers, customer["id"], 100000, mode="bank")
    await pay_in(client, headers, customer["id"], 5000)
    await client.post("/v1/transactions", json={
        "account_type": "ledger_account", "ledger_account_id": account["id"],
        "amount": 2000, "payment_mode": "cash"
    }, headers=headers)
    old = await pay_in(client, headers, customer["id"], 1000, transaction_date="2024-01-15T10:00:00")

    listed = (await client.get("/v1/transactions", headers=headers)).json()
    assert listed["count"] == 4
    assert listed["transactions"][-1]["id"] == old["id"]
    totals = {t["payment_mode"]: (t["total"], t["count"]) for t in listed["totals"]}
    assert totals == {"bank": (100000, 1), "cash": (8000, 3)}

    cash_only = (await client.get("/v1/transactions", params={"payment_mode": "cash"}, headers=headers)).json()
    assert cash_only["count"] == 3
    assert [t["payment_mode"] for t in cash_only["totals"]] == ["cash"]

    recent = (await client.get("/v1/transactions", params={"start_date": "2025-01-01T00:00:00"},
                               headers=headers)).json()
    assert old["id"] not in [t["id"] for t in recent["transactions"]]
    assert recent["count"] == 3

    await client.delete(f"/v1/transactions/{bank['id']}", headers=headers)
    reversed_only = (await client.get("/v1/transactions", params={"active": "false"}, headers=headers)).json()
    assert [t["id"] for t in reversed_only["transactions"]] == [bank["id"]]
