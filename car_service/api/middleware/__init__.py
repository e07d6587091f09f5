"""HTTP middleware evaluated before routing."""
