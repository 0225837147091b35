"""Domain layer: write batching and transaction lifecycle control."""
