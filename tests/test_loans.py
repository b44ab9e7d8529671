import pytest

from bukukas.store import LedgerError


@pytest.fixture
def loan(store):
    return store.add_loan("bank bri", "10000", note="modal usaha", payment_method="BANK")


def test_new_loan_books_proceeds(store, loan):
    assert loan.source == "BANK BRI"
    assert loan.initial_amount == loan.remaining_amount == 10000
    [tx] = store.transactions
    assert tx.type == "CASH_IN"
    assert tx.category == "LOAN_PROCEEDS"
    assert tx.account == "BANK"
    assert tx.related_id == loan.id
    assert tx.description == "PINJAMAN DARI BANK BRI - MODAL USAHA"


@pytest.mark.parametrize("source,amount", [("", 100), ("bank", 0), ("bank", "-")])
def test_new_loan_validation(store, source, amount):
    with pytest.raises(LedgerError):
        store.add_loan(source, amount)
    assert store.loans == [] and store.transactions == []


def test_repayment_splits_principal_and_interest(store, loan):
    store.repay_loan(loan.id, principal="2000", interest=300, payment_method="CASH")
    assert loan.remaining_amount == 8000
    repay = [t for t in store.transactions if t.type == "CASH_OUT"]
    by_cat = {t.category: t for t in repay}
    assert by_cat["LOAN_REPAYMENT"].amount == 2000
    assert by_cat["LOAN_REPAYMENT"].description == "BAYAR POKOK PINJAMAN BANK BRI"
    assert by_cat["LOAN_INTEREST"].amount == 300
    assert by_cat["LOAN_INTEREST"].description == "BUNGA PINJAMAN BANK BRI"
    assert all(t.related_id == loan.id and t.account == "CASH" for t in repay)
    s = store.summary()
    assert s["total_debt"] == 8000
    assert s["total_cash"] == 10000 - 2300


def test_interest_only_payment_keeps_principal(store, loan):
    store.repay_loan(loan.id, interest=150)
    assert loan.remaining_amount == 10000
    assert [t.category for t in store.transactions] == ["LOAN_PROCEEDS", "LOAN_INTEREST"]


@pytest.mark.parametrize("principal,interest", [(0, 0), ("", None), (-5, 0), (0, -1), (10001, 0)])
def test_repayment_validation(store, loan, principal, interest):
    with pytest.raises(LedgerError):
        store.repay_loan(loan.id, principal, interest)
    assert loan.remaining_amount == 10000
    assert len(store.transactions) == 1


def test_paid_off_loan_rejects_further_payments(store, loan):
    store.repay_loan(loan.id, principal=10000)
    assert loan.remaining_amount == 0
    with pytest.raises(LedgerError, match="lunas"):
        store.repay_loan(loan.id, interest=100)


def test_repay_unknown_loan(store):
    with pytest.raises(LedgerError):
        store.repay_loan("missing", principal=1)


def test_delete_loan_removes_its_transactions(store, loan, recorder):
    store.repay_loan(loan.id, principal=1000, interest=100)
    manual = store.add_manual_transaction("CASH_IN", "modal", 50, "setoran")
    store.delete_loan(loan.id)
    assert store.loans == []
    assert store.transactions == [manual]
    deletes = recorder.last[1]
    assert deletes["loans"] == [loan.id]
    assert len(deletes["transactions"]) == 3
    assert store.summary()["total_debt"] == 0
