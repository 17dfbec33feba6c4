"""Transport adapters for gpubsub."""
