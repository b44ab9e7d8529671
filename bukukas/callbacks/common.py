"""Helpers shared by the callback modules."""
from dash import ctx


def clicked_index(kind):
    """Index of the pattern-matched button that fired, or None for re-render noise."""
    trigger = ctx.triggered_id
    if not isinstance(trigger, dict) or trigger.get("type") != kind:
        return None
    if not ctx.triggered or not ctx.triggered[0].get("value"):
        return None
    return trigger["index"]


def bump(version):
    return (version or 0) + 1
