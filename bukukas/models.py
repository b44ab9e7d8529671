"""
models.py — Record types stored in the ledger.

Every record is a plain dataclass that round-trips through a flat dict row
(snake_case keys), which is what Supabase and the local JSON file hold.
Ids are UUID4 strings; timestamps are epoch milliseconds.
"""

import time
import uuid
from dataclasses import dataclass, asdict, fields
from typing import Optional


# ── Enumerations (plain string constants, stored as-is) ─────────────────────

class TransactionType:
    CASH_IN = "CASH_IN"
    CASH_OUT = "CASH_OUT"
    ALL = (CASH_IN, CASH_OUT)


class TransactionCategory:
    SALES = "SALES"
    STOCK_PURCHASE = "STOCK_PURCHASE"
    PRODUCTION_COST = "PRODUCTION_COST"
    DEPOSIT = "DEPOSIT"
    FORFEITED_DP = "FORFEITED_DP"
    LOAN_PROCEEDS = "LOAN_PROCEEDS"
    LOAN_REPAYMENT = "LOAN_REPAYMENT"
    LOAN_INTEREST = "LOAN_INTEREST"


class PaymentMethod:
    CASH = "CASH"
    BANK = "BANK"
    ALL = (CASH, BANK)


class StockType:
    FOR_PRODUCTION = "FOR_PRODUCTION"
    FOR_SALE = "FOR_SALE"
    ALL = (FOR_PRODUCTION, FOR_SALE)


class ProductionStatus:
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


def new_id() -> str:
    return str(uuid.uuid4())


def now_ms() -> int:
    return int(time.time() * 1000)


class _Row:
    """Mixin: dict conversion that ignores unknown keys from the database."""

    def to_row(self) -> dict:
        return asdict(self)

    @classmethod
    def from_row(cls, row: dict):
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in row.items() if k in known})


# ── Records ─────────────────────────────────────────────────────────────────

@dataclass
class Transaction(_Row):
    id: str
    type: str
    category: str
    amount: float
    description: str
    created_at: int
    payment_method: Optional[str] = PaymentMethod.CASH
    related_id: Optional[str] = None

    @property
    def account(self) -> str:
        # rows written before the bank account existed carry no method
        return self.payment_method or PaymentMethod.CASH

    @property
    def signed_amount(self) -> float:
        return self.amount if self.type == TransactionType.CASH_IN else -self.amount

    @property
    def is_locked(self) -> bool:
        return bool(self.related_id)


@dataclass
class Batch(_Row):
    id: str
    product_name: str
    stock_type: str
    initial_quantity: float
    current_quantity: float
    buy_price: float
    created_at: int
    production_id: Optional[str] = None

    @property
    def value(self) -> float:
        return self.current_quantity * self.buy_price


@dataclass
class Loan(_Row):
    id: str
    source: str
    initial_amount: float
    remaining_amount: float
    created_at: int
    note: str = ""


@dataclass
class ProductionRecord(_Row):
    id: str
    output_product_name: str
    output_quantity: float
    total_hpp: float
    created_at: int
    status: str = ProductionStatus.IN_PROGRESS
    completed_at: Optional[int] = None

    @property
    def unit_hpp(self) -> float:
        return self.total_hpp / self.output_quantity if self.output_quantity else 0.0


@dataclass
class ProductionUsage(_Row):
    id: str
    production_id: str
    batch_id: str
    quantity_used: float
    cost_per_unit: float


@dataclass
class Sale(_Row):
    id: str
    product_name: str
    quantity: float
    unit_price: float
    total: float
    cogs: float
    created_at: int

    @property
    def gross_profit(self) -> float:
        return self.total - self.cogs


@dataclass
class SaleUsage(_Row):
    id: str
    sale_id: str
    batch_id: str
    quantity_used: float
    cost_per_unit: float


# table name → record class, in dependency order (parents first)
TABLES = {
    "transactions": Transaction,
    "loans": Loan,
    "batches": Batch,
    "productions": ProductionRecord,
    "production_usages": ProductionUsage,
    "sales": Sale,
    "sale_usages": SaleUsage,
}
