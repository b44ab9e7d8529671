"""Produksi callbacks — view tabs, new-run form rows, edit, complete, delete."""
from dash import Input, Output, State, ctx, no_update, ALL

from bukukas import data_state as ds
from bukukas.callbacks.common import clicked_index, bump
from bukukas.components.cards import toast, error_alert
from bukukas.pages.production import (build_cards, build_kpis, tab_labels, material_options,
                                      ingredient_rows, cost_rows)


def _collect(first, second, first_key, second_key):
    return [{first_key: a, second_key: b} for a, b in zip(first or [], second or [])]


def _drop_row(rows, kind):
    idx = clicked_index(kind)
    if idx is None:
        return rows
    rows = [r for i, r in enumerate(rows) if i != idx]
    return rows or [{}]


def register_callbacks(app):
    # ── Renderers ─────────────────────────────────────────────────────────
    @app.callback(
        Output("prod-cards", "children"),
        Output("prod-kpis", "children"),
        Output("prod-tab-ongoing", "label"),
        Output("prod-tab-history", "label"),
        Input("prod-version", "data"),
        Input("prod-view", "active_tab"),
        prevent_initial_call=True,
    )
    def render_cards(_version, view):
        store = ds.get_store()
        ongoing_label, done_label = tab_labels(store)
        return build_cards(store, view or "ONGOING"), build_kpis(store), ongoing_label, done_label

    # ── New-run form rows ─────────────────────────────────────────────────
    @app.callback(
        Output("prod-ingredient-rows", "children"),
        Input("prod-open-new", "n_clicks"),
        Input("prod-add-ing", "n_clicks"),
        Input({"type": "prod-ing-del", "index": ALL}, "n_clicks"),
        State({"type": "prod-ing-name", "index": ALL}, "value"),
        State({"type": "prod-ing-qty", "index": ALL}, "value"),
        prevent_initial_call=True,
    )
    def edit_ingredient_rows(_open, _add, _dels, names, qtys):
        options = material_options(ds.get_store())
        trigger = ctx.triggered_id
        if trigger == "prod-open-new":
            return ingredient_rows([{}], options)
        rows = _collect(names, qtys, "product_name", "quantity")
        if trigger == "prod-add-ing":
            rows.append({})
        else:
            if clicked_index("prod-ing-del") is None:
                return no_update
            rows = _drop_row(rows, "prod-ing-del")
        return ingredient_rows(rows, options)

    @app.callback(
        Output("prod-cost-rows", "children"),
        Input("prod-open-new", "n_clicks"),
        Input("prod-add-cost", "n_clicks"),
        Input({"type": "prod-cost-del", "index": ALL}, "n_clicks"),
        State({"type": "prod-cost-desc", "index": ALL}, "value"),
        State({"type": "prod-cost-amt", "index": ALL}, "value"),
        prevent_initial_call=True,
    )
    def edit_cost_rows(_open, _add, _dels, descs, amounts):
        trigger = ctx.triggered_id
        if trigger == "prod-open-new":
            return cost_rows([{}])
        rows = _collect(descs, amounts, "description", "amount")
        if trigger == "prod-add-cost":
            rows.append({})
        else:
            if clicked_index("prod-cost-del") is None:
                return no_update
            rows = _drop_row(rows, "prod-cost-del")
        return cost_rows(rows)

    # ── Start a run ───────────────────────────────────────────────────────
    @app.callback(
        Output("prod-new-modal", "is_open"),
        Output("prod-new-error", "children"),
        Output("prod-version", "data", allow_duplicate=True),
        Output("prod-toast", "children", allow_duplicate=True),
        Output("prod-output-name", "value"),
        Output("prod-output-qty", "value"),
        Output("prod-date", "value"),
        Input("prod-open-new", "n_clicks"),
        Input("prod-new-cancel", "n_clicks"),
        Input("prod-new-save", "n_clicks"),
        State("prod-output-name", "value"),
        State("prod-output-qty", "value"),
        State("prod-date", "value"),
        State({"type": "prod-ing-name", "index": ALL}, "value"),
        State({"type": "prod-ing-qty", "index": ALL}, "value"),
        State({"type": "prod-cost-desc", "index": ALL}, "value"),
        State({"type": "prod-cost-amt", "index": ALL}, "value"),
        State("prod-cost-method", "value"),
        State("prod-version", "data"),
        prevent_initial_call=True,
    )
    def start_run(_open, _cancel, _save, name, qty, date, ing_names, ing_qtys,
                  cost_descs, cost_amts, method, version):
        trigger = ctx.triggered_id
        if trigger == "prod-open-new":
            return True, None, no_update, no_update, "", "", ""
        if trigger == "prod-new-cancel":
            return False, None, no_update, no_update, no_update, no_update, no_update

        # untouched blank rows are ignored, half-filled rows are validated by the store
        ingredients = [r for r in _collect(ing_names, ing_qtys, "product_name", "quantity")
                       if r["product_name"] or r["quantity"]]
        costs = [r for r in _collect(cost_descs, cost_amts, "description", "amount")
                 if r["amount"]]
        try:
            prod = ds.get_store().run_production(name, qty, ingredients, costs,
                                                 ds.parse_manual_date(date), method or "CASH")
        except ds.LedgerError as e:
            return True, error_alert(e), no_update, no_update, no_update, no_update, no_update
        return (False, None, bump(version),
                toast(f"{prod.output_product_name} — HPP terkunci {ds.money(prod.total_hpp)}",
                      "Produksi Dimulai"),
                no_update, no_update, no_update)

    # ── Edit ──────────────────────────────────────────────────────────────
    @app.callback(
        Output("prod-edit-modal", "is_open"),
        Output("prod-edit-id", "data"),
        Output("prod-edit-name", "value"),
        Output("prod-edit-qty", "value"),
        Output("prod-edit-error", "children"),
        Input({"type": "prod-edit-btn", "index": ALL}, "n_clicks"),
        prevent_initial_call=True,
    )
    def open_edit(_clicks):
        prod_id = clicked_index("prod-edit-btn")
        prod = next((p for p in ds.get_store().productions if p.id == prod_id), None) if prod_id else None
        if prod is None:
            return (no_update,) * 5
        return True, prod.id, prod.output_product_name, str(prod.output_quantity), None

    @app.callback(
        Output("prod-edit-modal", "is_open", allow_duplicate=True),
        Output("prod-edit-error", "children", allow_duplicate=True),
        Output("prod-version", "data", allow_duplicate=True),
        Output("prod-toast", "children", allow_duplicate=True),
        Input("prod-edit-cancel", "n_clicks"),
        Input("prod-edit-save", "n_clicks"),
        State("prod-edit-id", "data"),
        State("prod-edit-name", "value"),
        State("prod-edit-qty", "value"),
        State("prod-version", "data"),
        prevent_initial_call=True,
    )
    def save_edit(_cancel, _save, prod_id, name, qty, version):
        if ctx.triggered_id == "prod-edit-cancel" or not prod_id:
            return False, None, no_update, no_update
        try:
            ds.get_store().update_production(prod_id, output_product_name=name, output_quantity=qty)
        except ds.LedgerError as e:
            return True, error_alert(e), no_update, no_update
        return False, None, bump(version), toast("Data produksi diperbarui", "Produksi Diubah")

    # ── Complete ──────────────────────────────────────────────────────────
    @app.callback(
        Output("prod-version", "data", allow_duplicate=True),
        Output("prod-toast", "children", allow_duplicate=True),
        Input({"type": "prod-complete-btn", "index": ALL}, "n_clicks"),
        State("prod-version", "data"),
        prevent_initial_call=True,
    )
    def complete_run(_clicks, version):
        prod_id = clicked_index("prod-complete-btn")
        if not prod_id:
            return no_update, no_update
        try:
            batch = ds.get_store().complete_production(prod_id)
        except ds.LedgerError as e:
            return no_update, toast(str(e), "Gagal", icon="danger")
        return bump(version), toast(
            f"{ds.format_qty(batch.initial_quantity)} {batch.product_name} masuk stok @ {ds.money(batch.buy_price)}",
            "Produksi Selesai")

    # ── Delete ────────────────────────────────────────────────────────────
    @app.callback(
        Output("prod-version", "data", allow_duplicate=True),
        Output("prod-toast", "children", allow_duplicate=True),
        Input({"type": "prod-del-btn", "index": ALL}, "n_clicks"),
        State("prod-version", "data"),
        prevent_initial_call=True,
    )
    def delete_run(_clicks, version):
        prod_id = clicked_index("prod-del-btn")
        if not prod_id:
            return no_update, no_update
        try:
            ds.get_store().delete_production(prod_id)
        except ds.LedgerError as e:
            return no_update, toast(str(e), "Gagal Menghapus", icon="danger")
        return bump(version), toast("Produksi dibatalkan, bahan baku dikembalikan ke stok",
                                    "Produksi Dihapus", icon="warning")
