"""
HTTP-level tests: auth flow, role guards, error envelopes, ledger, JV and
payout endpoints.
"""

import pytest

from backend.app.models.enums import UserRole


# Auth

@pytest.mark.asyncio
async def test_register_login_me_logout(client):
    registered = await client.post("/v1/auth/register", json={
        "email": "ravi@example.com",
        "username": "ravi",
        "password": "password123",
        "full_name": "Ravi Shah",
    })
    assert registered.status_code == 201
    assert registered.json()["role"] == "EXECUTIVE"

    login = await client.post("/v1/auth/login", json={"username": "ravi@example.com", "password": "password123"})
    assert login.status_code == 200
    headers = {"Authorization": f"Bearer {login.json()['access_token']}"}

    me = await client.get("/v1/auth/me", headers=headers)
    assert me.status_code == 200
    assert me.json()["full_name"] == "Ravi Shah"

    logout = await client.post("/v1/auth/logout", headers=headers)
    assert logout.status_code == 200

    after = await client.get("/v1/auth/me", headers=headers)
    assert after.status_code == 401
    assert after.json()["error"] == "Token has been revoked"


@pytest.mark.asyncio
async def test_boss_registration_blocked(client):
    response = await client.post("/v1/auth/register", json={
        "email": "boss@example.com", "username": "boss", "password": "password123", "role": "BOSS"
    })

    assert response.status_code == 403
    body = response.json()
    assert body["success"] is False
    assert "Boss users cannot be registered" in body["error"]


@pytest.mark.asyncio
async def test_wrong_password(client, executive):
    response = await client.post("/v1/auth/login", json={"username": "ravi", "password": "nope"})

    assert response.status_code == 401
    assert response.json()["error_code"] == "ERR_UNAUTHORIZED"


@pytest.mark.asyncio
async def test_missing_token_rejected(client):
    response = await client.get("/v1/projects")

    assert response.status_code in (401, 403)
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_deactivated_user_loses_access(client, boss, executive, headers_for):
    headers = headers_for(executive)
    assert (await client.get("/v1/projects", headers=headers)).status_code == 200

    response = await client.post(f"/v1/users/{executive.id}/deactivate", headers=headers_for(boss))
    assert response.status_code == 200
    assert response.json()["is_active"] is False

    assert (await client.get("/v1/projects", headers=headers)).status_code == 401


# Guards

@pytest.mark.asyncio
async def test_executive_cannot_manage_rules_or_pay(client, executive, headers_for):
    headers = headers_for(executive)

    rule = await client.post("/v1/commission/rules", json={
        "name": "Self serve", "type": "fixed", "value": 1000
    }, headers=headers)
    pay = await client.post("/v1/commission/pay", json={"executive_id": executive.id, "amount": 10}, headers=headers)

    assert rule.status_code == 403
    assert pay.status_code == 403
    assert rule.json()["error_code"] == "ERR_FORBIDDEN"


@pytest.mark.asyncio
async def test_executive_reads_only_own_commission(client, executive, head_executive, headers_for):
    own = await client.get(f"/v1/commission/executive/{executive.id}", headers=headers_for(executive))
    other = await client.get(f"/v1/commission/executive/{head_executive.id}", headers=headers_for(executive))

    assert own.status_code == 200
    assert own.json()["summary"]["balance"] == 0
    assert other.status_code == 403


@pytest.mark.asyncio
async def test_request_validation_envelope(client, boss, headers_for):
    response = await client.post("/v1/jv", json={"amount": "lots"}, headers=headers_for(boss))

    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert body["error_code"] == "ERR_VALIDATION"
    assert body["details"]["errors"]


# Ledger and vouchers

@pytest.mark.asyncio
async def test_manual_entry_requires_amount(client, boss, headers_for):
    headers = headers_for(boss)
    account = await client.post("/v1/ledger-accounts", json={
        "account_name": "Office Rent", "group": "INDIRECT EXPENSES"
    }, headers=headers)
    assert account.status_code == 201

    response = await client.post("/v1/ledger", json={
        "party_type": "ledger_account", "party_id": account.json()["id"], "debit": 0, "credit": 0
    }, headers=headers)

    assert response.status_code == 400
    assert response.json()["error"] == "Please provide credit or debit amount"


@pytest.mark.asyncio
async def test_manual_entry_and_soft_delete(client, boss, headers_for):
    headers = headers_for(boss)
    account_id = (await client.post("/v1/ledger-accounts", json={
        "account_name": "Office Rent", "group": "INDIRECT EXPENSES", "opening_balance": 1000
    }, headers=headers)).json()["id"]

    entry = await client.post("/v1/ledger", json={
        "party_type": "ledger_account", "party_id": account_id, "debit": 250, "description": "March rent"
    }, headers=headers)
    assert entry.status_code == 201
    assert entry.json()["balance"] == 1250

    deleted = await client.delete(f"/v1/ledger/{entry.json()['id']}", headers=headers)
    assert deleted.status_code == 200
    assert deleted.json()["active"] is False

    ledger = (await client.get(f"/v1/ledger/{account_id}", params={"party_type": "ledger_account"},
                               headers=headers)).json()
    assert ledger["totals"]["current_balance"] == 1000


@pytest.mark.asyncio
async def test_duplicate_ledger_account_conflicts(client, boss, headers_for):
    headers = headers_for(boss)
    payload = {"account_name": "Cash In Hand", "group": "CASH"}
    assert (await client.post("/v1/ledger-accounts", json=payload, headers=headers)).status_code == 201

    response = await client.post("/v1/ledger-accounts", json=payload, headers=headers)

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_jv_endpoints(client, boss, executive, headers_for):
    headers = headers_for(boss)
    bank_id = (await client.post("/v1/ledger-accounts", json={
        "account_name": "HDFC Current", "group": "BANK ACCOUNTS", "opening_balance": 10000
    }, headers=headers)).json()["id"]

    created = await client.post("/v1/jv", json={
        "debit_account": {"party_type": "executive", "party_id": executive.id},
        "credit_account": {"party_type": "ledger_account", "party_id": bank_id},
        "amount": 3000,
        "narration": "Advance to executive",
    }, headers=headers)
    assert created.status_code == 201, created.text
    jv = created.json()
    assert jv["jv_number"] == "JV-1001"
    assert jv["debit_account_name"] == "Ravi"

    listed = await client.get("/v1/jv", headers=headers)
    assert [j["id"] for j in listed.json()] == [jv["id"]]

    executive_ledger = (await client.get(f"/v1/ledger/{executive.id}", params={"party_type": "executive"},
                                         headers=headers)).json()
    assert executive_ledger["totals"]["current_balance"] == 3000

    deleted = await client.delete(f"/v1/jv/{jv['id']}", headers=headers)
    assert deleted.status_code == 200
    assert (await client.get("/v1/jv", headers=headers)).json() == []


@pytest.mark.asyncio
async def test_audit_trail_records_jv(client, boss, executive, headers_for):
    headers = headers_for(boss)
    account_id = (await client.post("/v1/ledger-accounts", json={"account_name": "Petty Cash", "group": "CASH IN HAND"},
                                    headers=headers)).json()["id"]
    jv = (await client.post("/v1/jv", json={
        "debit_account": {"party_type": "ledger_account", "party_id": account_id},
        "credit_account": {"party_type": "executive", "party_id": executive.id},
        "amount": 500,
    }, headers=headers)).json()

    trail = await client.get("/v1/audit", params={"entity_type": "journal_voucher"}, headers=headers)

    assert trail.status_code == 200
    body = trail.json()
    assert body["total"] == 1
    assert body["logs"][0]["action"] == "JV_POSTED"
    assert body["logs"][0]["entity_id"] == jv["id"]
    assert body["logs"][0]["meta_data"]["jv_number"] == "JV-1001"

    denied = await client.get("/v1/audit", headers=headers_for(executive))
    assert denied.status_code == 403


@pytest.mark.asyncio
async def test_jv_unknown_party(client, boss, headers_for):
    response = await client.post("/v1/jv", json={
        "debit_account": {"party_type": "customer", "party_id": 77},
        "credit_account": {"party_type": "customer", "party_id": 78},
        "amount": 10,
    }, headers=headers_for(boss))

    assert response.status_code == 404


# Payout

@pytest.mark.asyncio
async def test_payout_endpoint(client, boss, executive, project, plots, headers_for):
    headers = headers_for(boss)
    await client.post("/v1/commission/rules", json={
        "name": "Flat booking", "type": "fixed", "value": 4500
    }, headers=headers)
    await client.post("/v1/customers", json={
        "name": "Anil Kumar", "phone": "9800000001", "project_id": project.id,
        "plot_id": plots[0].id, "assigned_executive_id": executive.id
    }, headers=headers)

    zero = await client.post("/v1/commission/pay", json={"executive_id": executive.id, "amount": 0}, headers=headers)
    assert zero.status_code == 422

    sub_cent = await client.post("/v1/commission/pay", json={"executive_id": executive.id, "amount": 0.004},
                                 headers=headers)
    assert sub_cent.status_code == 400
    assert sub_cent.json()["error"] == "Invalid payment amount"

    too_much = await client.post("/v1/commission/pay", json={"executive_id": executive.id, "amount": 5000},
                                 headers=headers)
    assert too_much.status_code == 409
    assert too_much.json()["error"] == "Amount exceeds pending balance of 4500.00"

    paid = await client.post("/v1/commission/pay", json={
        "executive_id": executive.id, "amount": 2000, "remarks": "March"
    }, headers=headers)
    assert paid.status_code == 200
    assert paid.json()["remaining_balance"] == 2500

    ledger = (await client.get(f"/v1/commission/executive/{executive.id}", headers=headers_for(executive))).json()
    assert ledger["summary"] == {"total_earned": 2500, "total_paid": 2000, "balance": 2500}


@pytest.mark.asyncio
async def test_rule_delete_endpoint(client, boss, headers_for):
    headers = headers_for(boss)
    rule = (await client.post("/v1/commission/rules", json={
        "name": "Unused", "type": "fixed", "value": 100
    }, headers=headers)).json()

    response = await client.delete(f"/v1/commission/rules/{rule['id']}", headers=headers)

    assert response.status_code == 200
    assert response.json()["outcome"] == "deleted"
    assert (await client.delete(f"/v1/commission/rules/{rule['id']}", headers=headers)).status_code == 404


# Health

@pytest.mark.asyncio
async def test_health_and_root(client):
    health = await client.get("/health")
    root = await client.get("/")

    assert health.json()["status"] == "healthy"
    assert health.json()["redis"] == "ok"
    assert root.status_code == 200
    assert "X-Correlation-ID" in health.headers
