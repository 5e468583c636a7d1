"""Domain layer: fixture model, ports and reconciliation."""
