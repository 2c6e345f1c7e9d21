"""Domain layer: models, ports and the reconciliation core."""
