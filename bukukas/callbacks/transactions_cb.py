"""Kas & Pinjaman callbacks — history filters, manual entries, loans, repayments."""
from dash import Input, Output, State, ctx, no_update, ALL

from bukukas import data_state as ds
from bukukas.callbacks.common import clicked_index, bump
from bukukas.components.cards import toast, error_alert
from bukukas.pages.transactions import build_history, build_loans, build_stats


def register_callbacks(app):
    # ── Renderers ─────────────────────────────────────────────────────────
    @app.callback(
        Output("kas-history", "children"),
        Input("kas-version", "data"),
        Input("kas-filter-type", "value"),
        Input("kas-filter-account", "value"),
        Input("kas-search", "value"),
        Input("kas-start", "value"),
        Input("kas-end", "value"),
    )
    def render_history(_version, type_filter, account_filter, search, start, end):
        return build_history(ds.get_store(), type_filter or "ALL", account_filter or "ALL",
                             search or "", start or "", end or "")

    @app.callback(
        Output("kas-stats", "children"),
        Output("kas-loans", "children"),
        Input("kas-version", "data"),
        prevent_initial_call=True,
    )
    def render_board(_version):
        store = ds.get_store()
        return build_stats(store), build_loans(store)

    # ── Manual entry ──────────────────────────────────────────────────────
    @app.callback(
        Output("kas-manual-modal", "is_open"),
        Output("kas-manual-error", "children"),
        Output("kas-version", "data", allow_duplicate=True),
        Output("kas-toast", "children", allow_duplicate=True),
        Output("kas-manual-category", "value"),
        Output("kas-manual-amount", "value"),
        Output("kas-manual-desc", "value"),
        Output("kas-manual-date", "value"),
        Input("kas-manual-open", "n_clicks"),
        Input("kas-manual-cancel", "n_clicks"),
        Input("kas-manual-save", "n_clicks"),
        State("kas-manual-type", "value"),
        State("kas-manual-method", "value"),
        State("kas-manual-category", "value"),
        State("kas-manual-amount", "value"),
        State("kas-manual-desc", "value"),
        State("kas-manual-date", "value"),
        State("kas-version", "data"),
        prevent_initial_call=True,
    )
    def manual_entry(_open, _cancel, _save, tx_type, method, category, amount, desc, date, version):
        trigger = ctx.triggered_id
        if trigger == "kas-manual-open":
            return True, None, no_update, no_update, "", "", "", ""
        if trigger == "kas-manual-cancel":
            return False, None, no_update, no_update, no_update, no_update, no_update, no_update
        try:
            tx = ds.get_store().add_manual_transaction(
                tx_type, category, amount, desc, method, ds.parse_manual_date(date))
        except ds.LedgerError as e:
            return True, error_alert(e), no_update, no_update, no_update, no_update, no_update, no_update
        return (False, None, bump(version),
                toast(f"{tx.description} — {ds.money(tx.amount)}", "Kas Tercatat"),
                no_update, no_update, no_update, no_update)

    # ── Edit manual entry ─────────────────────────────────────────────────
    @app.callback(
        Output("kas-edit-modal", "is_open"),
        Output("kas-edit-id", "data"),
        Output("kas-edit-category", "value"),
        Output("kas-edit-amount", "value"),
        Output("kas-edit-desc", "value"),
        Output("kas-edit-method", "value"),
        Output("kas-edit-date", "value"),
        Output("kas-edit-error", "children"),
        Input({"type": "kas-edit-btn", "index": ALL}, "n_clicks"),
        prevent_initial_call=True,
    )
    def open_edit(_clicks):
        tx_id = clicked_index("kas-edit-btn")
        tx = ds.get_store().transaction_by_id(tx_id) if tx_id else None
        if tx is None:
            return (no_update,) * 8
        return (True, tx.id, tx.category, str(tx.amount), tx.description, tx.account,
                ds.date_input_value(tx.created_at), None)

    @app.callback(
        Output("kas-edit-modal", "is_open", allow_duplicate=True),
        Output("kas-edit-error", "children", allow_duplicate=True),
        Output("kas-version", "data", allow_duplicate=True),
        Output("kas-toast", "children", allow_duplicate=True),
        Input("kas-edit-cancel", "n_clicks"),
        Input("kas-edit-save", "n_clicks"),
        State("kas-edit-id", "data"),
        State("kas-edit-category", "value"),
        State("kas-edit-amount", "value"),
        State("kas-edit-desc", "value"),
        State("kas-edit-method", "value"),
        State("kas-edit-date", "value"),
        State("kas-version", "data"),
        prevent_initial_call=True,
    )
    def save_edit(_cancel, _save, tx_id, category, amount, desc, method, date, version):
        if ctx.triggered_id == "kas-edit-cancel" or not tx_id:
            return False, None, no_update, no_update
        store = ds.get_store()
        tx = store.transaction_by_id(tx_id)
        # an empty date keeps the original timestamp
        created_at = ds.parse_manual_date(date) or (tx.created_at if tx else None)
        try:
            store.update_transaction(tx_id, category=category, description=desc,
                                     amount=amount, payment_method=method, created_at=created_at)
        except ds.LedgerError as e:
            return True, error_alert(e), no_update, no_update
        return False, None, bump(version), toast("Transaksi diperbarui", "Kas Diubah")

    # ── Delete manual entry ───────────────────────────────────────────────
    @app.callback(
        Output("kas-version", "data", allow_duplicate=True),
        Output("kas-toast", "children", allow_duplicate=True),
        Input({"type": "kas-del-btn", "index": ALL}, "n_clicks"),
        State("kas-version", "data"),
        prevent_initial_call=True,
    )
    def delete_entry(_clicks, version):
        tx_id = clicked_index("kas-del-btn")
        if not tx_id:
            return no_update, no_update
        try:
            ds.get_store().delete_transaction(tx_id)
        except ds.LedgerError as e:
            return no_update, toast(str(e), "Gagal Menghapus", icon="danger")
        return bump(version), toast("Transaksi dihapus", "Kas Dihapus", icon="warning")

    # ── New loan ──────────────────────────────────────────────────────────
    @app.callback(
        Output("kas-loan-modal", "is_open"),
        Output("kas-loan-error", "children"),
        Output("kas-version", "data", allow_duplicate=True),
        Output("kas-toast", "children", allow_duplicate=True),
        Output("kas-loan-source", "value"),
        Output("kas-loan-amount", "value"),
        Output("kas-loan-note", "value"),
        Output("kas-loan-date", "value"),
        Input("kas-loan-open", "n_clicks"),
        Input("kas-loan-cancel", "n_clicks"),
        Input("kas-loan-save", "n_clicks"),
        State("kas-loan-method", "value"),
        State("kas-loan-source", "value"),
        State("kas-loan-amount", "value"),
        State("kas-loan-note", "value"),
        State("kas-loan-date", "value"),
        State("kas-version", "data"),
        prevent_initial_call=True,
    )
    def new_loan(_open, _cancel, _save, method, source, amount, note, date, version):
        trigger = ctx.triggered_id
        if trigger == "kas-loan-open":
            return True, None, no_update, no_update, "", "", "", ""
        if trigger == "kas-loan-cancel":
            return False, None, no_update, no_update, no_update, no_update, no_update, no_update
        try:
            loan = ds.get_store().add_loan(source, amount, note, ds.parse_manual_date(date), method)
        except ds.LedgerError as e:
            return True, error_alert(e), no_update, no_update, no_update, no_update, no_update, no_update
        return (False, None, bump(version),
                toast(f"Dana {ds.money(loan.initial_amount)} dari {loan.source} diterima", "Pinjaman Baru"),
                no_update, no_update, no_update, no_update)

    # ── Repayment ─────────────────────────────────────────────────────────
    @app.callback(
        Output("kas-repay-modal", "is_open"),
        Output("kas-repay-id", "data"),
        Output("kas-repay-title", "children"),
        Output("kas-repay-principal", "value"),
        Output("kas-repay-interest", "value"),
        Output("kas-repay-date", "value"),
        Output("kas-repay-method", "value"),
        Output("kas-repay-error", "children"),
        Input({"type": "loan-repay-btn", "index": ALL}, "n_clicks"),
        prevent_initial_call=True,
    )
    def open_repay(_clicks):
        loan_id = clicked_index("loan-repay-btn")
        loan = ds.get_store().loan_by_id(loan_id) if loan_id else None
        if loan is None:
            return (no_update,) * 8
        title = f"{loan.source} — sisa pokok {ds.money(loan.remaining_amount)}"
        return True, loan.id, title, "", "", "", "CASH", None

    @app.callback(
        Output("kas-repay-modal", "is_open", allow_duplicate=True),
        Output("kas-repay-error", "children", allow_duplicate=True),
        Output("kas-version", "data", allow_duplicate=True),
        Output("kas-toast", "children", allow_duplicate=True),
        Input("kas-repay-cancel", "n_clicks"),
        Input("kas-repay-save", "n_clicks"),
        State("kas-repay-id", "data"),
        State("kas-repay-principal", "value"),
        State("kas-repay-interest", "value"),
        State("kas-repay-date", "value"),
        State("kas-repay-method", "value"),
        State("kas-version", "data"),
        prevent_initial_call=True,
    )
    def save_repay(_cancel, _save, loan_id, principal, interest, date, method, version):
        if ctx.triggered_id == "kas-repay-cancel" or not loan_id:
            return False, None, no_update, no_update
        try:
            loan = ds.get_store().repay_loan(loan_id, principal or 0, interest or 0,
                                             ds.parse_manual_date(date), method)
        except ds.LedgerError as e:
            return True, error_alert(e), no_update, no_update
        return (False, None, bump(version),
                toast(f"Sisa hutang {loan.source}: {ds.money(loan.remaining_amount)}", "Cicilan Dibayar"))

    # ── Delete loan ───────────────────────────────────────────────────────
    @app.callback(
        Output("kas-version", "data", allow_duplicate=True),
        Output("kas-toast", "children", allow_duplicate=True),
        Input({"type": "loan-del-btn", "index": ALL}, "n_clicks"),
        State("kas-version", "data"),
        prevent_initial_call=True,
    )
    def delete_loan(_clicks, version):
        loan_id = clicked_index("loan-del-btn")
        if not loan_id:
            return no_update, no_update
        try:
            ds.get_store().delete_loan(loan_id)
        except ds.LedgerError as e:
            return no_update, toast(str(e), "Gagal Menghapus", icon="danger")
        return bump(version), toast("Pinjaman dan transaksinya dihapus", "Pinjaman Dihapus", icon="warning")
