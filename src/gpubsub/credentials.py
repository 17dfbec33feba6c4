"""Credential resolution and authenticated transport construction."""

import json
import logging
from typing import Optional

import requests
from google.auth.transport.requests import AuthorizedSession
from google.oauth2 import service_account
from pydantic_settings import BaseSettings, SettingsConfigDict

from gpubsub.adapters.http import DEFAULT_API_URL, HttpTransport
from gpubsub.errors import CredentialsError

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/pubsub",
    "https://www.googleapis.com/auth/cloud-platform",
]
# Checked in order; the first variable that is set wins
PATH_ENV_VARS = ("PUBSUB_KEYFILE", "GOOGLE_CLOUD_KEYFILE")
JSON_ENV_VARS = ("PUBSUB_KEYFILE_JSON", "GOOGLE_CLOUD_KEYFILE_JSON")


class CredentialSettings(BaseSettings):
    """Environment configuration for connecting to the service."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Key file paths
    pubsub_keyfile: Optional[str] = None
    google_cloud_keyfile: Optional[str] = None

    # Raw JSON key material
    pubsub_keyfile_json: Optional[str] = None
    google_cloud_keyfile_json: Optional[str] = None

    pubsub_api_url: str = DEFAULT_API_URL
    # host:port of a local emulator; disables authentication
    pubsub_emulator_host: Optional[str] = None


def resolve_credentials(
    settings: Optional[CredentialSettings] = None,
) -> service_account.Credentials:
    """
    Build scoped service account credentials from the environment.

    Key file paths take priority over raw JSON key material.

    Raises:
        CredentialsError: no key source is configured, or the key is unusable
    """
    settings = settings or CredentialSettings()

    for var in PATH_ENV_VARS:
        path = getattr(settings, var.lower())
        if path:
            logger.debug("Loading service account key from %s (%s)", path, var)
            try:
                return service_account.Credentials.from_service_account_file(path, scopes=SCOPES)
            except (OSError, ValueError) as e:
                raise CredentialsError(f"Unable to load key file {path} from {var}: {e}") from e

    for var in JSON_ENV_VARS:
        raw = getattr(settings, var.lower())
        if raw:
            logger.debug("Loading service account key from %s", var)
            try:
                info = json.loads(raw)
                return service_account.Credentials.from_service_account_info(info, scopes=SCOPES)
            except (ValueError, TypeError) as e:
                raise CredentialsError(f"Unable to load key material from {var}: {e}") from e

    raise CredentialsError(
        "No credentials found; set one of " + ", ".join(PATH_ENV_VARS + JSON_ENV_VARS)
    )


def connect(
    settings: Optional[CredentialSettings] = None, timeout: Optional[float] = None
) -> HttpTransport:
    """
    Create an authenticated REST transport.

    When PUBSUB_EMULATOR_HOST is set the transport talks plain HTTP to the
    emulator and no credentials are resolved.

    Args:
        settings: Configuration, read from the environment when omitted
        timeout: Per-request timeout in seconds; None waits indefinitely
    """
    settings = settings or CredentialSettings()

    if settings.pubsub_emulator_host:
        logger.info("Using Pub/Sub emulator at %s", settings.pubsub_emulator_host)
        return HttpTransport(
            requests.Session(),
            base_url=f"http://{settings.pubsub_emulator_host}/v1",
            timeout=timeout,
        )

    credentials = resolve_credentials(settings)
    return HttpTransport(
        AuthorizedSession(credentials),
        base_url=settings.pubsub_api_url,
        timeout=timeout,
    )
