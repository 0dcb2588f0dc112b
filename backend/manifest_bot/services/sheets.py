"""Google Sheets helper service: append one manifest row per call."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, List, Optional, Sequence

from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from ..config import SheetConfig
from ..exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


class SheetsService:
    """Thin wrapper around the Sheets v4 values.append call."""

    def __init__(self, cfg: SheetConfig, *, service: Optional[Any] = None) -> None:
        self.cfg = cfg
        self._service = service

    def _client(self) -> Any:
        if self._service is None:
            if not (self.cfg.sheet_id and self.cfg.client_email and self.cfg.private_key):
                raise ExternalServiceError("Google Sheets is not configured (SHEET_ID / GS_CLIENT_EMAIL / GS_PRIVATE_KEY)")
            creds = service_account.Credentials.from_service_account_info(
                {
                    "type": "service_account",
                    "client_email": self.cfg.client_email,
                    "private_key": self.cfg.private_key,
                    "token_uri": "https://oauth2.googleapis.com/token",
                },
                scopes=SCOPES,
            )
            self._service = build("sheets", "v4", credentials=creds, cache_discovery=False)
        return self._service

    def append_row(self, values: Sequence[str]) -> Optional[str]:
        """Append a single row. Returns the updated range reported by the API."""
        row: List[str] = list(values)
        try:
            response = (
                self._client()
                .spreadsheets()
                .values()
                .append(
                    spreadsheetId=self.cfg.sheet_id,
                    range=self.cfg.sheet_range,
                    valueInputOption="USER_ENTERED",
                    insertDataOption="INSERT_ROWS",
                    body={"values": [row]},
                )
                .execute()
            )
        except HttpError as exc:
            logger.error("Sheets append failed: %s", exc)
            raise ExternalServiceError(f"Google Sheets error (HTTP {exc.resp.status})") from exc
        except GoogleAuthError as exc:
            logger.error("Sheets auth failed: %s", exc)
            raise ExternalServiceError("Google Sheets authentication error") from exc
        updated = (response or {}).get("updates", {}).get("updatedRange")
        logger.info("Appended manifest row to %s", updated or self.cfg.sheet_range)
        return updated

    async def append_row_async(self, values: Sequence[str]) -> Optional[str]:
        # googleapiclient is blocking; keep it off the event loop
        return await asyncio.to_thread(self.append_row, values)
