"""
Ledger party lookup.

A ledger owner is a customer, an executive (user) or a ledger account,
addressed by (party_type, party_id).
"""

from typing import Union

from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.exceptions import NotFoundError, ValidationError
from backend.app.models.customer import Customer
from backend.app.models.ledger_account import LedgerAccount
from backend.app.models.user import User
from backend.app.models.enums import COMMISSION_ROLES
from backend.app.models.ledger_enums import PartyType

Party = Union[Customer, User, LedgerAccount]

_PARTY_MODELS = {
    PartyType.CUSTOMER: Customer,
    PartyType.EXECUTIVE: User,
    PartyType.LEDGER_ACCOUNT: LedgerAccount,
}


def parse_party_type(value) -> PartyType:
    try:
        return PartyType(value)
    except ValueError:
        raise ValidationError(
            f"Please provide valid partyType ({', '.join(p.value for p in PartyType)})"
        )


async def get_party(db: AsyncSession, party_type: PartyType, party_id: int) -> Party:
    """
    Load the party behind a ledger.

    Raises:
        NotFoundError: no such customer / executive / ledger account
    """
    party_type = parse_party_type(party_type)
    party = await db.get(_PARTY_MODELS[party_type], party_id)

    if party is None or (party_type == PartyType.EXECUTIVE and party.role not in COMMISSION_ROLES):
        raise NotFoundError(party_type.value, party_id)

    return party


def party_display_name(party: Party) -> str:
    if isinstance(party, LedgerAccount):
        return party.account_name
    if isinstance(party, User):
        return party.full_name or party.username
    return party.name
