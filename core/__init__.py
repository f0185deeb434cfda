"""Portfolio models, account registry and the valuation subscriber."""
