"""
Tests for the ledger posting service.

Running balances, validation, soft-delete and reference lookups.
"""

import pytest
from datetime import datetime, timedelta

from backend.app.core.exceptions import ValidationError, NotFoundError
from backend.app.domain.ledger.posting_service import LedgerPostingService
from backend.app.models.ledger_enums import PartyType, ReferenceType

ACCOUNT = PartyType.LEDGER_ACCOUNT


@pytest.mark.asyncio
async def test_each_row_extends_previous_balance(db_session):
    first = await LedgerPostingService.post(db_session, ACCOUNT, 1, debit=1000)
    second = await LedgerPostingService.post(db_session, ACCOUNT, 1, credit=300)
    third = await LedgerPostingService.post(db_session, ACCOUNT, 1, debit=50, credit=20)
    await db_session.commit()

    assert [first.balance, second.balance, third.balance] == [1000, 700, 730]
    assert await LedgerPostingService.current_balance(db_session, ACCOUNT, 1) == 730


@pytest.mark.asyncio
async def test_parties_keep_separate_balances(db_session):
    await LedgerPostingService.post(db_session, ACCOUNT, 1, debit=500)
    await LedgerPostingService.post(db_session, PartyType.CUSTOMER, 1, credit=200)
    other = await LedgerPostingService.post(db_session, ACCOUNT, 2, debit=10)

    assert other.balance == 10
    assert await LedgerPostingService.current_balance(db_session, ACCOUNT, 1) == 500
    assert await LedgerPostingService.current_balance(db_session, PartyType.CUSTOMER, 1) == -200


@pytest.mark.asyncio
async def test_new_party_has_zero_balance(db_session):
    assert await LedgerPostingService.current_balance(db_session, ACCOUNT, 42) == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("debit,credit", [(None, None), (0, 0), (0, None)])
async def test_post_requires_an_amount(db_session, debit, credit):
    with pytest.raises(ValidationError) as exc:
        await LedgerPostingService.post(db_session, ACCOUNT, 1, debit=debit, credit=credit)

    assert exc.value.message == "Please provide credit or debit amount"


@pytest.mark.asyncio
async def test_post_rejects_negative_amounts(db_session):
    with pytest.raises(ValidationError):
        await LedgerPostingService.post(db_session, ACCOUNT, 1, debit=-5)


@pytest.mark.asyncio
async def test_latest_row_by_transaction_date_sets_previous_balance(db_session):
    today = datetime(2024, 3, 10)
    await LedgerPostingService.post(db_session, ACCOUNT, 1, debit=100, transaction_date=today)
    await LedgerPostingService.post(db_session, ACCOUNT, 1, debit=40, transaction_date=today - timedelta(days=5))

    statement = await LedgerPostingService.party_statement(db_session, ACCOUNT, 1)
    dates = [e.transaction_date for e in statement["entries"]]

    assert dates == sorted(dates)
    assert statement["entries"][0].balance == 140


@pytest.mark.asyncio
async def test_deactivate_repairs_live_balance_but_keeps_snapshots(db_session):
    first = await LedgerPostingService.post(db_session, ACCOUNT, 1, debit=1000)
    middle = await LedgerPostingService.post(db_session, ACCOUNT, 1, credit=300)
    last = await LedgerPostingService.post(db_session, ACCOUNT, 1, debit=50)

    await LedgerPostingService.deactivate(db_session, middle.id)
    await db_session.commit()

    assert middle.active is False
    assert last.balance == 750
    assert await LedgerPostingService.current_balance(db_session, ACCOUNT, 1) == 1050

    statement = await LedgerPostingService.party_statement(db_session, ACCOUNT, 1)
    assert [e.id for e in statement["entries"]] == [first.id, last.id]
    assert statement["totals"] == {
        "total_debit": 1050, "total_credit": 0, "current_balance": 1050, "snapshot_balance": 750
    }

    after = await LedgerPostingService.post(db_session, ACCOUNT, 1, debit=100)
    assert after.balance == 850
    assert await LedgerPostingService.current_balance(db_session, ACCOUNT, 1) == 1150

    statement = await LedgerPostingService.party_statement(db_session, ACCOUNT, 1)
    assert statement["totals"]["current_balance"] == 1150
    assert statement["totals"]["snapshot_balance"] == 850


@pytest.mark.asyncio
async def test_deactivate_twice_fails(db_session):
    entry = await LedgerPostingService.post(db_session, ACCOUNT, 1, debit=10)
    await LedgerPostingService.deactivate(db_session, entry.id)

    with pytest.raises(ValidationError):
        await LedgerPostingService.deactivate(db_session, entry.id)


@pytest.mark.asyncio
async def test_deactivate_missing_row(db_session):
    with pytest.raises(NotFoundError):
        await LedgerPostingService.deactivate(db_session, 999)


@pytest.mark.asyncio
async def test_deactivate_by_reference_matches_reference_type(db_session):
    await LedgerPostingService.post(
        db_session, PartyType.CUSTOMER, 1, credit=500,
        reference_type=ReferenceType.TRANSACTION, reference_id=5
    )
    await LedgerPostingService.post(
        db_session, ACCOUNT, 1, debit=500,
        reference_type=ReferenceType.JOURNAL_VOUCHER, reference_id=5
    )

    retired = await LedgerPostingService.deactivate_by_reference(db_session, 5, ReferenceType.JOURNAL_VOUCHER)

    assert len(retired) == 1
    assert retired[0].party_type == ACCOUNT
    assert await LedgerPostingService.current_balance(db_session, ACCOUNT, 1) == 0
    assert await LedgerPostingService.current_balance(db_session, PartyType.CUSTOMER, 1) == -500
