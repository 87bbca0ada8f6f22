"""Pure technical, valuation and risk calculations."""
