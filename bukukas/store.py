"""
store.py — The ledger engine.

LedgerStore holds the whole application state in memory: cash transactions,
inventory batches, loans, production runs and sales. Every mutation validates
its input before touching anything, so a LedgerError leaves the state exactly
as it was. After a successful mutation the changed/deleted rows are handed to
the optional persistence hook as two dicts: {table: [row, ...]} and
{table: [id, ...]}.

Costing rules:
  - batches are consumed oldest first (created_at, then insertion order)
  - a production run's HPP (cost of goods) is fixed when the run starts:
    material slices at their batch price + operating costs paid in cash
  - completing a run turns the output into a FOR_SALE batch at HPP / qty
  - transactions created by a module (related_id set) are locked
"""

import re
import threading
from collections import defaultdict
from datetime import datetime
from functools import wraps

import numpy as np
import pandas as pd

from bukukas.formatting import (
    to_number, format_idr, format_qty, parse_manual_date, day_start,
)
from bukukas.models import (
    TABLES, Transaction, Batch, Loan, ProductionRecord, ProductionUsage,
    Sale, SaleUsage, TransactionType, TransactionCategory, PaymentMethod,
    StockType, ProductionStatus, new_id, now_ms,
)

EPS = 1e-9

SOURCE_LABELS = {
    TransactionCategory.STOCK_PURCHASE: "STOK",
    TransactionCategory.SALES: "PENJUALAN",
    TransactionCategory.PRODUCTION_COST: "PRODUKSI",
    TransactionCategory.DEPOSIT: "ORDER DP",
    TransactionCategory.FORFEITED_DP: "ORDER DP",
    TransactionCategory.LOAN_PROCEEDS: "PINJAMAN",
    TransactionCategory.LOAN_REPAYMENT: "PINJAMAN",
    TransactionCategory.LOAN_INTEREST: "PINJAMAN",
}

_COST_LABEL_RE = re.compile(r"\(([^()]*)\)\s*$")


class LedgerError(ValueError):
    """Raised when an operation would break the books. Nothing is changed."""


def _clean(text):
    return str(text or "").strip().upper()


def _q(val):
    # keeps repeated float subtraction from leaving 1e-16 crumbs in stock
    return round(val, 6)


def source_label(tx):
    """Which module owns a locked transaction; None for manual entries."""
    if not tx.related_id:
        return None
    label = SOURCE_LABELS.get(tx.category)
    if label:
        return label
    if "BUNGA PINJAMAN" in tx.description:
        return "PINJAMAN"
    return "MODUL"


def cost_label(tx):
    """BIAYA PRODUKSI ROTI (LISTRIK) -> LISTRIK"""
    m = _COST_LABEL_RE.search(tx.description)
    return m.group(1) if m else tx.description


def _locked(method):
    """Hold the store lock from validation through persistence."""
    @wraps(method)
    def wrapper(self, *args, **kwargs):
        with self.lock:
            return method(self, *args, **kwargs)
    return wrapper


class _Changes:
    def __init__(self):
        self.upserts = defaultdict(dict)
        self.deletes = defaultdict(list)

    def put(self, table, record):
        self.upserts[table][record.id] = record

    def drop(self, table, record_id):
        self.upserts[table].pop(record_id, None)
        self.deletes[table].append(record_id)


class LedgerStore:
    def __init__(self, state=None, persist=None):
        state = state or {}
        self.transactions = [Transaction.from_row(r) for r in state.get("transactions", [])]
        self.loans = [Loan.from_row(r) for r in state.get("loans", [])]
        self.batches = [Batch.from_row(r) for r in state.get("batches", [])]
        self.productions = [ProductionRecord.from_row(r) for r in state.get("productions", [])]
        self.production_usages = [ProductionUsage.from_row(r) for r in state.get("production_usages", [])]
        self.sales = [Sale.from_row(r) for r in state.get("sales", [])]
        self.sale_usages = [SaleUsage.from_row(r) for r in state.get("sale_usages", [])]
        self._persist = persist
        # Dash serves callbacks on several threads; mutations run one at a time
        self.lock = threading.RLock()

    def to_state(self) -> dict:
        with self.lock:
            return {table: [r.to_row() for r in self._collection(table)] for table in TABLES}

    # ── internals ───────────────────────────────────────────────────────

    def _collection(self, table):
        return getattr(self, table)

    def _commit(self, changes):
        if self._persist is None:
            return
        upserts = {t: [r.to_row() for r in recs.values()] for t, recs in changes.upserts.items() if recs}
        deletes = {t: list(ids) for t, ids in changes.deletes.items() if ids}
        if upserts or deletes:
            self._persist(upserts, deletes)

    def _remove(self, changes, table, predicate):
        coll = self._collection(table)
        gone = [r for r in coll if predicate(r)]
        if gone:
            gone_ids = {r.id for r in gone}
            coll[:] = [r for r in coll if r.id not in gone_ids]
            for r in gone:
                changes.drop(table, r.id)
        return gone

    @staticmethod
    def _find(coll, record_id, what):
        for r in coll:
            if r.id == record_id:
                return r
        raise LedgerError(f"{what} tidak ditemukan.")

    @staticmethod
    def _method(payment_method):
        method = _clean(payment_method) or PaymentMethod.CASH
        if method not in PaymentMethod.ALL:
            raise LedgerError(f"Metode pembayaran tidak dikenal: {payment_method}")
        return method

    @staticmethod
    def _timestamp(custom_timestamp):
        return int(custom_timestamp) if custom_timestamp is not None else now_ms()

    def _add_transaction(self, changes, tx_type, category, amount, description,
                         payment_method, created_at, related_id=None):
        tx = Transaction(
            id=new_id(), type=tx_type, category=category, amount=amount,
            description=description, created_at=created_at,
            payment_method=payment_method, related_id=related_id,
        )
        self.transactions.append(tx)
        changes.put("transactions", tx)
        return tx

    def _fifo_batches(self, product_name, stock_type):
        candidates = [b for b in self.batches
                      if b.product_name == product_name and b.stock_type == stock_type
                      and b.current_quantity > EPS]
        # sorted() is stable, so equal timestamps keep insertion order
        return sorted(candidates, key=lambda b: b.created_at)

    def _consume(self, changes, product_name, quantity, stock_type):
        """Take `quantity` from the oldest batches first. Caller checks availability."""
        slices = []
        remaining = quantity
        for batch in self._fifo_batches(product_name, stock_type):
            if remaining <= EPS:
                break
            taken = min(remaining, batch.current_quantity)
            batch.current_quantity = _q(batch.current_quantity - taken)
            remaining = _q(remaining - taken)
            changes.put("batches", batch)
            slices.append((batch, taken))
        return slices

    def _restore(self, changes, usages):
        # resolve every batch before touching any of them
        pairs = [(self._find(self.batches, u.batch_id, "Batch"), u) for u in usages]
        for batch, usage in pairs:
            batch.current_quantity = _q(batch.current_quantity + usage.quantity_used)
            changes.put("batches", batch)

    def _batch_is_used(self, batch_id):
        return (any(u.batch_id == batch_id for u in self.production_usages)
                or any(u.batch_id == batch_id for u in self.sale_usages))

    def _available(self, stock_type):
        totals = {}
        for b in self.batches:
            if b.stock_type == stock_type and b.current_quantity > EPS:
                totals[b.product_name] = _q(totals.get(b.product_name, 0) + b.current_quantity)
        return totals

    def _check_stock(self, required, stock_type):
        available = self._available(stock_type)
        for name, qty in required.items():
            have = available.get(name, 0)
            if have + EPS < qty:
                raise LedgerError(
                    f"Stok {name} tidak cukup: butuh {format_qty(qty)}, tersedia {format_qty(have)}."
                )

    # ── manual cash entries ─────────────────────────────────────────────

    @_locked
    def add_manual_transaction(self, type, category, amount, description,
                               payment_method=PaymentMethod.CASH, custom_timestamp=None):
        amount = to_number(amount)
        category = _clean(category)
        description = _clean(description)
        if type not in TransactionType.ALL:
            raise LedgerError(f"Jenis transaksi tidak dikenal: {type}")
        if amount <= 0:
            raise LedgerError("Nominal harus lebih dari 0.")
        if not description or not category:
            raise LedgerError("Kategori dan keterangan wajib diisi.")
        method = self._method(payment_method)
        changes = _Changes()
        tx = self._add_transaction(changes, type, category, amount, description,
                                   method, self._timestamp(custom_timestamp))
        self._commit(changes)
        return tx

    def _editable(self, tx_id):
        tx = self._find(self.transactions, tx_id, "Transaksi")
        if tx.is_locked:
            raise LedgerError(
                f"Transaksi terkunci oleh modul {source_label(tx)}; ubah lewat modul tersebut."
            )
        return tx

    @_locked
    def update_transaction(self, tx_id, category=None, description=None, amount=None,
                           payment_method=None, created_at=None):
        tx = self._editable(tx_id)
        updates = {}
        if category is not None:
            updates["category"] = _clean(category)
            if not updates["category"]:
                raise LedgerError("Kategori wajib diisi.")
        if description is not None:
            updates["description"] = _clean(description)
            if not updates["description"]:
                raise LedgerError("Keterangan wajib diisi.")
        if amount is not None:
            updates["amount"] = to_number(amount)
            if updates["amount"] <= 0:
                raise LedgerError("Nominal harus lebih dari 0.")
        if payment_method is not None:
            updates["payment_method"] = self._method(payment_method)
        if created_at is not None:
            updates["created_at"] = int(created_at)
        for key, val in updates.items():
            setattr(tx, key, val)
        changes = _Changes()
        changes.put("transactions", tx)
        self._commit(changes)
        return tx

    @_locked
    def delete_transaction(self, tx_id):
        tx = self._editable(tx_id)
        changes = _Changes()
        self._remove(changes, "transactions", lambda t: t.id == tx.id)
        self._commit(changes)

    # ── loans ───────────────────────────────────────────────────────────

    @_locked
    def add_loan(self, source, initial_amount, note="", custom_timestamp=None,
                 payment_method=PaymentMethod.CASH):
        source = _clean(source)
        amount = to_number(initial_amount)
        note = str(note or "").strip()
        if not source:
            raise LedgerError("Sumber pinjaman wajib diisi.")
        if amount <= 0:
            raise LedgerError("Jumlah pinjaman harus lebih dari 0.")
        method = self._method(payment_method)
        created_at = self._timestamp(custom_timestamp)
        changes = _Changes()
        loan = Loan(id=new_id(), source=source, initial_amount=amount,
                    remaining_amount=amount, created_at=created_at, note=note)
        self.loans.append(loan)
        changes.put("loans", loan)
        desc = f"PINJAMAN DARI {source}" + (f" - {note.upper()}" if note else "")
        self._add_transaction(changes, TransactionType.CASH_IN, TransactionCategory.LOAN_PROCEEDS,
                              amount, desc, method, created_at, loan.id)
        self._commit(changes)
        return loan

    @_locked
    def repay_loan(self, loan_id, principal=0, interest=0, custom_timestamp=None,
                   payment_method=PaymentMethod.CASH):
        loan = self._find(self.loans, loan_id, "Pinjaman")
        principal = to_number(principal or 0)
        interest = to_number(interest or 0)
        if principal < 0 or interest < 0:
            raise LedgerError("Nominal pembayaran tidak boleh negatif.")
        if principal <= 0 and interest <= 0:
            raise LedgerError("Nominal pembayaran harus lebih dari 0.")
        if loan.remaining_amount <= EPS:
            raise LedgerError("Pinjaman ini sudah lunas.")
        if principal > loan.remaining_amount + EPS:
            raise LedgerError(f"Pokok melebihi sisa hutang ({format_idr(loan.remaining_amount)}).")
        method = self._method(payment_method)
        created_at = self._timestamp(custom_timestamp)
        changes = _Changes()
        if principal > 0:
            self._add_transaction(changes, TransactionType.CASH_OUT, TransactionCategory.LOAN_REPAYMENT,
                                  principal, f"BAYAR POKOK PINJAMAN {loan.source}",
                                  method, created_at, loan.id)
            loan.remaining_amount = max(0.0, _q(loan.remaining_amount - principal))
            changes.put("loans", loan)
        if interest > 0:
            self._add_transaction(changes, TransactionType.CASH_OUT, TransactionCategory.LOAN_INTEREST,
                                  interest, f"BUNGA PINJAMAN {loan.source}",
                                  method, created_at, loan.id)
        self._commit(changes)
        return loan

    @_locked
    def delete_loan(self, loan_id):
        loan = self._find(self.loans, loan_id, "Pinjaman")
        changes = _Changes()
        self._remove(changes, "transactions", lambda t: t.related_id == loan.id)
        self._remove(changes, "loans", lambda l: l.id == loan.id)
        self._commit(changes)

    # ── inventory batches ───────────────────────────────────────────────

    @_locked
    def add_batch(self, product_name, quantity, buy_price, stock_type=StockType.FOR_PRODUCTION,
                  payment_method=PaymentMethod.CASH, custom_timestamp=None, record_payment=True):
        name = _clean(product_name)
        quantity = to_number(quantity)
        buy_price = to_number(buy_price)
        if not name:
            raise LedgerError("Nama barang wajib diisi.")
        if quantity <= 0:
            raise LedgerError("Kuantitas harus lebih dari 0.")
        if buy_price < 0:
            raise LedgerError("Harga beli tidak boleh negatif.")
        if stock_type not in StockType.ALL:
            raise LedgerError(f"Jenis stok tidak dikenal: {stock_type}")
        method = self._method(payment_method)
        created_at = self._timestamp(custom_timestamp)
        changes = _Changes()
        batch = Batch(id=new_id(), product_name=name, stock_type=stock_type,
                      initial_quantity=quantity, current_quantity=quantity,
                      buy_price=buy_price, created_at=created_at)
        self.batches.append(batch)
        changes.put("batches", batch)
        total = quantity * buy_price
        if record_payment and total > 0:
            self._add_transaction(changes, TransactionType.CASH_OUT, TransactionCategory.STOCK_PURCHASE,
                                  total, f"BELI STOK {name} ({format_qty(quantity)} UNIT)",
                                  method, created_at, batch.id)
        self._commit(changes)
        return batch

    @_locked
    def delete_batch(self, batch_id):
        batch = self._find(self.batches, batch_id, "Batch")
        if batch.production_id:
            raise LedgerError("Batch hasil produksi hanya bisa dihapus lewat produksinya.")
        if self._batch_is_used(batch.id):
            raise LedgerError("Batch sudah terpakai produksi/penjualan dan tidak bisa dihapus.")
        changes = _Changes()
        self._remove(changes, "transactions", lambda t: t.related_id == batch.id)
        self._remove(changes, "batches", lambda b: b.id == batch.id)
        self._commit(changes)

    # ── sales ───────────────────────────────────────────────────────────

    @_locked
    def record_sale(self, product_name, quantity, unit_price, payment_method=PaymentMethod.CASH,
                    custom_timestamp=None):
        name = _clean(product_name)
        quantity = to_number(quantity)
        unit_price = to_number(unit_price)
        if not name:
            raise LedgerError("Nama produk wajib diisi.")
        if quantity <= 0:
            raise LedgerError("Kuantitas harus lebih dari 0.")
        if unit_price <= 0:
            raise LedgerError("Harga jual harus lebih dari 0.")
        method = self._method(payment_method)
        self._check_stock({name: quantity}, StockType.FOR_SALE)
        created_at = self._timestamp(custom_timestamp)
        changes = _Changes()
        sale = Sale(id=new_id(), product_name=name, quantity=quantity, unit_price=unit_price,
                    total=quantity * unit_price, cogs=0.0, created_at=created_at)
        cogs = 0.0
        for batch, taken in self._consume(changes, name, quantity, StockType.FOR_SALE):
            usage = SaleUsage(id=new_id(), sale_id=sale.id, batch_id=batch.id,
                              quantity_used=taken, cost_per_unit=batch.buy_price)
            self.sale_usages.append(usage)
            changes.put("sale_usages", usage)
            cogs += taken * batch.buy_price
        sale.cogs = cogs
        self.sales.append(sale)
        changes.put("sales", sale)
        self._add_transaction(changes, TransactionType.CASH_IN, TransactionCategory.SALES,
                              sale.total, f"PENJUALAN {name} ({format_qty(quantity)} UNIT)",
                              method, created_at, sale.id)
        self._commit(changes)
        return sale

    @_locked
    def delete_sale(self, sale_id):
        sale = self._find(self.sales, sale_id, "Penjualan")
        changes = _Changes()
        self._restore(changes, [u for u in self.sale_usages if u.sale_id == sale.id])
        self._remove(changes, "sale_usages", lambda u: u.sale_id == sale.id)
        self._remove(changes, "transactions", lambda t: t.related_id == sale.id)
        self._remove(changes, "sales", lambda s: s.id == sale.id)
        self._commit(changes)

    # ── production ──────────────────────────────────────────────────────

    @_locked
    def run_production(self, output_name, output_quantity, ingredients, operating_costs=(),
                       custom_timestamp=None, payment_method=PaymentMethod.CASH):
        """Start a run: consume materials FIFO, pay operating costs, lock HPP.

        ingredients: [{"product_name": str, "quantity": number}, ...]
        operating_costs: [{"amount": number, "description": str}, ...]
        """
        output_name = _clean(output_name)
        output_quantity = to_number(output_quantity)
        if not output_name:
            raise LedgerError("Nama produk jadi wajib diisi.")
        if output_quantity <= 0:
            raise LedgerError("Kuantitas target harus lebih dari 0.")
        if not ingredients:
            raise LedgerError("Minimal satu bahan baku.")

        required = {}
        for ing in ingredients:
            name = _clean(ing.get("product_name"))
            qty = to_number(ing.get("quantity") or 0)
            if not name or qty <= 0:
                raise LedgerError("Setiap bahan baku harus punya nama dan kuantitas lebih dari 0.")
            required[name] = _q(required.get(name, 0) + qty)
        self._check_stock(required, StockType.FOR_PRODUCTION)

        costs = []
        for cost in operating_costs or ():
            amount = to_number(cost.get("amount") or 0)
            if amount < 0:
                raise LedgerError("Biaya operasional tidak boleh negatif.")
            if amount > 0:
                costs.append((amount, _clean(cost.get("description"))))
        method = self._method(payment_method)

        created_at = self._timestamp(custom_timestamp)
        changes = _Changes()
        prod = ProductionRecord(id=new_id(), output_product_name=output_name,
                                output_quantity=output_quantity, total_hpp=0.0,
                                created_at=created_at)
        material_cost = 0.0
        for name, qty in required.items():
            for batch, taken in self._consume(changes, name, qty, StockType.FOR_PRODUCTION):
                usage = ProductionUsage(id=new_id(), production_id=prod.id, batch_id=batch.id,
                                        quantity_used=taken, cost_per_unit=batch.buy_price)
                self.production_usages.append(usage)
                changes.put("production_usages", usage)
                material_cost += taken * batch.buy_price

        operating_total = 0.0
        for amount, desc in costs:
            label = f"BIAYA PRODUKSI {output_name}" + (f" ({desc})" if desc else "")
            self._add_transaction(changes, TransactionType.CASH_OUT, TransactionCategory.PRODUCTION_COST,
                                  amount, label, method, created_at, prod.id)
            operating_total += amount

        prod.total_hpp = material_cost + operating_total
        self.productions.append(prod)
        changes.put("productions", prod)
        self._commit(changes)
        return prod

    @_locked
    def update_production(self, production_id, output_product_name=None, output_quantity=None):
        prod = self._find(self.productions, production_id, "Produksi")
        if prod.status != ProductionStatus.IN_PROGRESS:
            raise LedgerError("Produksi yang sudah selesai tidak bisa diubah.")
        name = prod.output_product_name if output_product_name is None else _clean(output_product_name)
        qty = prod.output_quantity if output_quantity is None else to_number(output_quantity)
        if not name:
            raise LedgerError("Nama produk jadi wajib diisi.")
        if qty <= 0:
            raise LedgerError("Kuantitas target harus lebih dari 0.")
        prod.output_product_name = name
        prod.output_quantity = qty
        changes = _Changes()
        changes.put("productions", prod)
        self._commit(changes)
        return prod

    @_locked
    def complete_production(self, production_id, custom_timestamp=None):
        prod = self._find(self.productions, production_id, "Produksi")
        if prod.status == ProductionStatus.COMPLETED:
            raise LedgerError("Produksi ini sudah selesai.")
        completed_at = self._timestamp(custom_timestamp)
        changes = _Changes()
        prod.status = ProductionStatus.COMPLETED
        prod.completed_at = completed_at
        changes.put("productions", prod)
        batch = Batch(id=new_id(), product_name=prod.output_product_name,
                      stock_type=StockType.FOR_SALE, initial_quantity=prod.output_quantity,
                      current_quantity=prod.output_quantity, buy_price=prod.unit_hpp,
                      created_at=completed_at, production_id=prod.id)
        self.batches.append(batch)
        changes.put("batches", batch)
        self._commit(changes)
        return batch

    @_locked
    def delete_production(self, production_id):
        """Cancel a run: materials go back to their batches, cost entries disappear."""
        prod = self._find(self.productions, production_id, "Produksi")
        finished = [b for b in self.batches if b.production_id == prod.id]
        for b in finished:
            if self._batch_is_used(b.id) or b.current_quantity + EPS < b.initial_quantity:
                raise LedgerError("Produk jadi dari produksi ini sudah terjual; hapus penjualannya dulu.")
        changes = _Changes()
        self._restore(changes, self.production_usages_for(prod.id))
        self._remove(changes, "production_usages", lambda u: u.production_id == prod.id)
        self._remove(changes, "transactions", lambda t: t.related_id == prod.id)
        self._remove(changes, "batches", lambda b: b.production_id == prod.id)
        self._remove(changes, "productions", lambda p: p.id == prod.id)
        self._commit(changes)

    # ── queries ─────────────────────────────────────────────────────────

    def summary(self) -> dict:
        total_income = sum(t.amount for t in self.transactions if t.type == TransactionType.CASH_IN)
        total_expense = sum(t.amount for t in self.transactions if t.type == TransactionType.CASH_OUT)
        total_cash = total_income - total_expense
        cash_only = sum(t.signed_amount for t in self.transactions if t.account == PaymentMethod.CASH)
        bank_only = sum(t.signed_amount for t in self.transactions if t.account == PaymentMethod.BANK)
        total_debt = sum(l.remaining_amount for l in self.loans)
        total_inventory_value = sum(b.value for b in self.batches)
        total_asset = total_cash + total_inventory_value
        return {
            "total_income": total_income,
            "total_expense": total_expense,
            "total_cash": total_cash,
            "cash_only": cash_only,
            "bank_only": bank_only,
            "total_debt": total_debt,
            "total_inventory_value": total_inventory_value,
            "total_asset": total_asset,
            "net_wealth": total_asset - total_debt,
        }

    def filter_transactions(self, type_filter="ALL", account_filter="ALL", search="",
                            start_date="", end_date=""):
        start_ts = parse_manual_date(start_date)
        end_ts = parse_manual_date(end_date)
        needle = (search or "").lower()
        result = []
        for t in self.transactions:
            if type_filter != "ALL" and t.type != type_filter:
                continue
            if account_filter != "ALL" and t.account != account_filter:
                continue
            if needle and needle not in t.description.lower():
                continue
            tx_day = day_start(t.created_at)
            if start_ts is not None and tx_day < start_ts:
                continue
            if end_ts is not None and tx_day > end_ts:
                continue
            result.append(t)
        return sorted(result, key=lambda t: t.created_at, reverse=True)

    source_label = staticmethod(source_label)
    cost_label = staticmethod(cost_label)

    def available_materials(self) -> dict:
        return self._available(StockType.FOR_PRODUCTION)

    def available_goods(self) -> dict:
        return self._available(StockType.FOR_SALE)

    def ongoing_productions(self):
        rows = [p for p in self.productions if p.status == ProductionStatus.IN_PROGRESS]
        return sorted(rows, key=lambda p: p.created_at, reverse=True)

    def completed_productions(self):
        rows = [p for p in self.productions if p.status == ProductionStatus.COMPLETED]
        return sorted(rows, key=lambda p: p.created_at, reverse=True)

    def production_usages_for(self, production_id):
        return [u for u in self.production_usages if u.production_id == production_id]

    def production_costs(self, production_id):
        return [t for t in self.transactions
                if t.related_id == production_id and t.category == TransactionCategory.PRODUCTION_COST]

    def batch_by_id(self, batch_id):
        for b in self.batches:
            if b.id == batch_id:
                return b
        return None

    def loan_by_id(self, loan_id):
        for l in self.loans:
            if l.id == loan_id:
                return l
        return None

    def transaction_by_id(self, tx_id):
        for t in self.transactions:
            if t.id == tx_id:
                return t
        return None

    def stock_summary(self) -> pd.DataFrame:
        """One row per (product, stock type): quantity, value, average unit cost."""
        columns = ["product_name", "stock_type", "batches", "current_quantity", "value", "avg_cost"]
        if not self.batches:
            return pd.DataFrame(columns=columns)
        df = pd.DataFrame([{**b.to_row(), "value": b.value} for b in self.batches])
        agg = df.groupby(["product_name", "stock_type"]).agg(
            batches=("id", "count"),
            current_quantity=("current_quantity", "sum"),
            value=("value", "sum"),
        ).reset_index()
        qty = agg["current_quantity"].to_numpy(dtype=float)
        agg["avg_cost"] = np.where(qty > EPS, agg["value"].to_numpy(dtype=float) / np.where(qty > EPS, qty, 1.0), 0.0)
        return agg[columns].sort_values(["stock_type", "product_name"]).reset_index(drop=True)

    def monthly_cashflow(self) -> pd.DataFrame:
        """Cash in / cash out / net per calendar month (local time)."""
        columns = ["month", "cash_in", "cash_out", "net"]
        if not self.transactions:
            return pd.DataFrame(columns=columns)
        df = pd.DataFrame([{
            "month": datetime.fromtimestamp(t.created_at / 1000).strftime("%Y-%m"),
            "cash_in": t.amount if t.type == TransactionType.CASH_IN else 0.0,
            "cash_out": t.amount if t.type == TransactionType.CASH_OUT else 0.0,
        } for t in self.transactions])
        monthly = df.groupby("month")[["cash_in", "cash_out"]].sum().reset_index()
        monthly["net"] = monthly["cash_in"] - monthly["cash_out"]
        return monthly[columns].sort_values("month").reset_index(drop=True)
