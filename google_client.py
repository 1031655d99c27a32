# google_client.py
"""
Google Drive access for report archiving.

Authorizes once through the installed-app flow and keeps the resulting
token next to the app, so later archives reuse it.
"""

import logging
import os
from typing import Optional

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build

import config

logger = logging.getLogger(__name__)

# only files created by this app are visible to it
DRIVE_SCOPES = ["https://www.googleapis.com/auth/drive.file"]

DRIVE_TOKEN_FILE = os.getenv("GOOGLE_TOKEN_FILE", "token_drive.json")


def load_cached_credentials(token_file: str) -> Optional[Credentials]:
    if not os.path.exists(token_file):
        return None
    try:
        return Credentials.from_authorized_user_file(token_file, DRIVE_SCOPES)
    except ValueError as e:
        logger.warning("Ignoring unusable Drive token %s: %s", token_file, e)
        return None


def store_credentials(creds: Credentials, token_file: str) -> None:
    with open(token_file, "w", encoding="utf-8") as fh:
        fh.write(creds.to_json())


def authorize(client_secrets_file: str) -> Credentials:
    logger.info("Starting Drive authorization flow")
    flow = InstalledAppFlow.from_client_secrets_file(client_secrets_file, DRIVE_SCOPES)
    return flow.run_local_server(port=0)


def get_drive_credentials(
        token_file: Optional[str] = None,
        client_secrets_file: Optional[str] = None,
) -> Credentials:
    """
    Cached token if still valid, refreshed token if expired, otherwise a
    fresh authorization. Any new or refreshed token is written back.
    """
    token_file = token_file or DRIVE_TOKEN_FILE
    client_secrets_file = client_secrets_file or config.GOOGLE_CREDENTIALS_JSON
    if not client_secrets_file:
        raise RuntimeError("GOOGLE_CREDENTIALS_JSON is not set in the environment")

    creds = load_cached_credentials(token_file)
    if creds and creds.valid:
        return creds

    if creds and creds.expired and creds.refresh_token:
        try:
            creds.refresh(Request())
        except RefreshError as e:
            logger.warning("Drive token refresh rejected, authorizing again: %s", e)
            creds = authorize(client_secrets_file)
    else:
        creds = authorize(client_secrets_file)

    store_credentials(creds, token_file)
    return creds


def get_drive_service(token_file: Optional[str] = None):
    return build("drive", "v3", credentials=get_drive_credentials(token_file))
