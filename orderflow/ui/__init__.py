"""Terminal rendering for order flow charts."""
