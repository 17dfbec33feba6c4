"""Wire-format and configuration models for gpubsub."""
