"""Display projection of the ledger: labels, dates, signed amounts and totals."""

from __future__ import annotations

from decimal import Decimal

from app.schemas.models import Category, LedgerEntry, LedgerView, Transaction, TransactionType
from app.services.ledger_store import compute_totals

CATEGORY_LABELS = {
    Category.RIDE: "Ride",
    Category.FUEL: "Fuel",
    Category.MAINTENANCE: "Maintenance",
    Category.FOOD: "Food",
    Category.PARKING: "Parking",
    Category.CAR_WASH: "Car wash",
    Category.OTHER: "Other",
}

DESCRIPTION_PLACEHOLDER = "No description"
DATE_FORMAT = "%d/%m/%Y"


def format_money(value: Decimal, currency_symbol: str = "R$") -> str:
    return f"{currency_symbol} {value:.2f}"


def balance_status(balance: Decimal) -> str:
    if balance > 0:
        return "positive"
    if balance < 0:
        return "negative"
    return "zero"


def render_entry(txn: Transaction, currency_symbol: str = "R$") -> LedgerEntry:
    sign = "+" if txn.type is TransactionType.INCOME else "-"
    return LedgerEntry(
        id=txn.id,
        type=txn.type,
        category=txn.category,
        category_label=CATEGORY_LABELS.get(txn.category, txn.category.value),
        description=txn.description or DESCRIPTION_PLACEHOLDER,
        date=txn.date.strftime(DATE_FORMAT),
        amount=f"{sign} {format_money(txn.amount, currency_symbol)}",
        value=txn.amount if sign == "+" else -txn.amount,
    )


def render_ledger(transactions: list[Transaction], currency_symbol: str = "R$") -> LedgerView:
    """Project the ledger, in its stored order, into what the page shows."""
    totals = compute_totals(transactions)
    return LedgerView(
        totals=totals,
        formatted_totals={
            "income": format_money(totals.income, currency_symbol),
            "expense": format_money(totals.expense, currency_symbol),
            "balance": format_money(totals.balance, currency_symbol),
        },
        balance_status=balance_status(totals.balance),
        entries=[render_entry(txn, currency_symbol) for txn in transactions],
        empty=not transactions,
    )
