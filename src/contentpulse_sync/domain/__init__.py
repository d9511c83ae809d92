"""Domain layer: pure reconciliation logic and its ports."""
