"""Pure reservation rules: states, occupancy and cancellation window."""
