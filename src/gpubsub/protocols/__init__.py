"""Protocols implemented by transports and message handlers."""
