"""Page routing callback — renders the correct page based on URL."""
from dash import html, Input, Output


def register_callbacks(app):
    @app.callback(
        Output("page-content", "children"),
        Input("url", "pathname"),
    )
    def route_page(pathname):
        if pathname == "/" or pathname is None:
            from bukukas.pages.overview import layout
            return layout()
        elif pathname == "/kas":
            from bukukas.pages.transactions import layout
            return layout()
        elif pathname == "/produksi":
            from bukukas.pages.production import layout
            return layout()
        elif pathname == "/stok":
            from bukukas.pages.inventory import layout
            return layout()
        else:
            return html.Div([
                html.H3("404 — Halaman Tidak Ditemukan", style={"color": "#e74c3c"}),
                html.P(f"Tidak ada halaman di '{pathname}'"),
            ], style={"padding": "40px"})
