"""Stok callbacks — purchases, FIFO sales, batch and sale deletion."""
from dash import Input, Output, State, no_update, ALL

from bukukas import data_state as ds
from bukukas.callbacks.common import clicked_index, bump
from bukukas.components.cards import toast, error_alert
from bukukas.pages.inventory import build_batches, build_kpis, build_sales, build_summary, goods_options


def register_callbacks(app):
    @app.callback(
        Output("stok-kpis", "children"),
        Output("stok-summary", "children"),
        Output("stok-batches", "children"),
        Output("stok-sales", "children"),
        Output("stok-sale-product", "options"),
        Input("stok-version", "data"),
        prevent_initial_call=True,
    )
    def render_stock(_version):
        store = ds.get_store()
        return (build_kpis(store), build_summary(store), build_batches(store),
                build_sales(store), goods_options(store))

    @app.callback(
        Output("stok-add-error", "children"),
        Output("stok-version", "data", allow_duplicate=True),
        Output("stok-toast", "children", allow_duplicate=True),
        Output("stok-name", "value"),
        Output("stok-qty", "value"),
        Output("stok-price", "value"),
        Input("stok-add-btn", "n_clicks"),
        State("stok-name", "value"),
        State("stok-qty", "value"),
        State("stok-price", "value"),
        State("stok-type", "value"),
        State("stok-method", "value"),
        State("stok-date", "value"),
        State("stok-version", "data"),
        prevent_initial_call=True,
    )
    def add_batch(n_clicks, name, qty, price, stock_type, method, date, version):
        if not n_clicks:
            return (no_update,) * 6
        try:
            batch = ds.get_store().add_batch(name, qty, price, stock_type, method,
                                             ds.parse_manual_date(date))
        except ds.LedgerError as e:
            return error_alert(e), no_update, no_update, no_update, no_update, no_update
        return (None, bump(version),
                toast(f"{batch.product_name} {ds.format_qty(batch.initial_quantity)} unit "
                      f"@ {ds.money(batch.buy_price)}", "Stok Masuk"),
                "", "", "")

    @app.callback(
        Output("stok-sale-error", "children"),
        Output("stok-version", "data", allow_duplicate=True),
        Output("stok-toast", "children", allow_duplicate=True),
        Output("stok-sale-qty", "value"),
        Output("stok-sale-price", "value"),
        Input("stok-sale-btn", "n_clicks"),
        State("stok-sale-product", "value"),
        State("stok-sale-qty", "value"),
        State("stok-sale-price", "value"),
        State("stok-sale-method", "value"),
        State("stok-sale-date", "value"),
        State("stok-version", "data"),
        prevent_initial_call=True,
    )
    def sell(n_clicks, product, qty, price, method, date, version):
        if not n_clicks:
            return (no_update,) * 5
        try:
            sale = ds.get_store().record_sale(product, qty, price, method, ds.parse_manual_date(date))
        except ds.LedgerError as e:
            return error_alert(e), no_update, no_update, no_update, no_update
        return (None, bump(version),
                toast(f"{sale.product_name}: {ds.money(sale.total)} (laba {ds.money(sale.gross_profit)})",
                      "Penjualan Tercatat"),
                "", "")

    @app.callback(
        Output("stok-version", "data", allow_duplicate=True),
        Output("stok-toast", "children", allow_duplicate=True),
        Input({"type": "batch-del-btn", "index": ALL}, "n_clicks"),
        State("stok-version", "data"),
        prevent_initial_call=True,
    )
    def delete_batch(_clicks, version):
        batch_id = clicked_index("batch-del-btn")
        if not batch_id:
            return no_update, no_update
        try:
            ds.get_store().delete_batch(batch_id)
        except ds.LedgerError as e:
            return no_update, toast(str(e), "Gagal Menghapus", icon="danger")
        return bump(version), toast("Batch dan pembeliannya dihapus", "Batch Dihapus", icon="warning")

    @app.callback(
        Output("stok-version", "data", allow_duplicate=True),
        Output("stok-toast", "children", allow_duplicate=True),
        Input({"type": "sale-del-btn", "index": ALL}, "n_clicks"),
        State("stok-version", "data"),
        prevent_initial_call=True,
    )
    def delete_sale(_clicks, version):
        sale_id = clicked_index("sale-del-btn")
        if not sale_id:
            return no_update, no_update
        try:
            ds.get_store().delete_sale(sale_id)
        except ds.LedgerError as e:
            return no_update, toast(str(e), "Gagal Menghapus", icon="danger")
        return bump(version), toast("Penjualan dibatalkan, stok dikembalikan", "Penjualan Dihapus",
                                    icon="warning")
