"""REST adapter for gpubsub transport protocol."""

from gpubsub.adapters.http.transport import DEFAULT_API_URL, HttpTransport

__all__ = ["DEFAULT_API_URL", "HttpTransport"]
