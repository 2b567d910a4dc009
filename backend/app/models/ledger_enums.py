"""
Ledger, commission and booking enumerations.
"""

import enum


class PartyType(str, enum.Enum):
    """Owner of a running-balance ledger."""
    CUSTOMER = "customer"
    EXECUTIVE = "executive"
    LEDGER_ACCOUNT = "ledger_account"


class ReferenceType(str, enum.Enum):
    """What a ledger row was posted for."""
    TRANSACTION = "transaction"
    CUSTOMER = "customer"
    ADJUSTMENT = "adjustment"
    JOURNAL_VOUCHER = "journal_voucher"
    OTHER = "other"


class CommissionType(str, enum.Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class CommissionTrigger(str, enum.Enum):
    DEAL_CLOSED = "deal_closed"  # Customer created, plot sold
    PAYMENT_RECEIVED = "payment_received"  # Receipt recorded


class CommissionBasis(str, enum.Enum):
    FULL_DEAL_VALUE = "full_deal_value"
    RECEIVED_AMOUNT = "received_amount"


class CommissionStatus(str, enum.Enum):
    """earned -> paid is the only transition."""
    EARNED = "earned"
    PAID = "paid"


class PlotStatus(str, enum.Enum):
    VACANT = "vacant"
    BOOKED = "booked"
    SOLD = "sold"
    HOLD = "hold"


class EntryType(str, enum.Enum):
    RECEIPT = "Receipt"  # Money in from the customer
    PAYMENT = "Payment"  # Money back out to the customer


class PaymentMode(str, enum.Enum):
    CASH = "cash"
    BANK = "bank"
    UPI = "upi"


class BalanceType(str, enum.Enum):
    DR = "Dr"
    CR = "Cr"
