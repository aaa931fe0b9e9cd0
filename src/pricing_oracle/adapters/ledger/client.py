# src/pricing_oracle/adapters/ledger/client.py
"""
Ledger Client - ConversionTable Submission

The ledger accepts a ConversionTable tied to its current global definition.
Both calls go through the ledger's HTTP gateway as zome-style function
calls on the `transactor` zome:

- get_current_global_definition -> {"id": "<hash>", ...}
- create_conversion_table(table) -> "<hash>" or {"hash": "<hash>"}

The client never retries; any failure raises SubmissionError and the caller
decides what to do with the already-printed table.

Files that USE this module:
- pricing_oracle.app (--submit)
- tests.test_ledger_client (unit tests)

Files that this module USES:
- pricing_oracle.adapters.formatting.formatter (table_to_dict for the payload)
- pricing_oracle.config (ledger gateway settings)
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import requests

from pricing_oracle.adapters.formatting.formatter import table_to_dict
from pricing_oracle.config import Settings, settings as default_settings
from pricing_oracle.domain.errors import SubmissionError
from pricing_oracle.domain.models import ConversionTable

log = logging.getLogger(__name__)

ZOME_NAME = "transactor"


class LedgerClient(ABC):
    @abstractmethod
    def fetch_global_definition(self) -> str:
        """Return the id of the ledger's current global definition."""
        raise NotImplementedError

    @abstractmethod
    def submit_conversion_table(self, table: ConversionTable) -> str:
        """Submit the table and return the ledger's confirmation id."""
        raise NotImplementedError


class LedgerGatewayClient(LedgerClient):
    """LedgerClient speaking to the ledger's HTTP gateway with requests."""

    def __init__(self, cfg: Optional[Settings] = None, timeout: Optional[int] = None):
        cfg = cfg or default_settings
        self.base_url = cfg.ledger_url
        self.app_id = cfg.ledger_app_id
        self.role_name = cfg.ledger_role_name
        self.timeout = timeout or cfg.http_timeout_seconds
        self.user_agent = cfg.http_user_agent

    def _call(self, fn_name: str, payload: Any = None) -> Any:
        url = f"{self.base_url}/{self.app_id}/{self.role_name}/{ZOME_NAME}/{fn_name}"
        log.info("[ledger] Calling %s/%s (app_id:%s)", ZOME_NAME, fn_name, self.app_id)
        try:
            resp = requests.post(
                url,
                json=payload,
                headers={"Accept": "application/json", "User-Agent": self.user_agent},
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout:
            raise SubmissionError(f"{fn_name} timed out after {self.timeout}s")
        except requests.exceptions.RequestException as e:
            raise SubmissionError(f"failed to connect to ledger at {self.base_url}: {e}") from e

        if resp.status_code >= 400:
            raise SubmissionError(f"{fn_name} failed (HTTP {resp.status_code}): {(resp.text or '')[:200]}")
        try:
            return resp.json()
        except ValueError as e:
            raise SubmissionError(f"{fn_name} returned invalid JSON: {e}") from e

    def fetch_global_definition(self) -> str:
        body = self._call("get_current_global_definition")
        gd_id = body.get("id") if isinstance(body, dict) else None
        if not isinstance(gd_id, str) or not gd_id:
            raise SubmissionError("get_current_global_definition returned no id")
        log.info("[ledger] Got GlobalDefinition: %s", gd_id)
        return gd_id

    def submit_conversion_table(self, table: ConversionTable) -> str:
        body = self._call("create_conversion_table", table_to_dict(table))
        if isinstance(body, dict):
            body = body.get("hash")
        if not isinstance(body, str) or not body:
            raise SubmissionError("create_conversion_table returned no hash")
        log.info("[ledger] Created ConversionTable: %s", body)
        return body
