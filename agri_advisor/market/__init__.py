"""
Market insights panel logic.

Modules
-------
insights : unique_by_commodity() + simulate_price_history() + build_insights()
           + sort_insights() — pure functions, no I/O.
session  : MarketPanelState — selection, fetch tokens, derived views.
"""
