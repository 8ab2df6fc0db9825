"""HTTP access to the bulk restaurant CSV feed."""
from __future__ import annotations

import csv
import io
import logging
from typing import List, Optional

import requests

from ..config import Settings
from ..errors import format_error, feed_error

logger = logging.getLogger(__name__)

MIN_RECORDS = 2


class FeedClient:
    def __init__(self, settings: Settings, session: Optional[requests.Session] = None) -> None:
        self.url = settings.feed_url
        self.timeout = settings.feed_timeout
        self.session = session or requests.Session()

    def fetch_catalog_csv(self) -> bytes:
        try:
            resp = self.session.get(self.url, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error("Catalog feed request failed: %s", exc)
            raise feed_error(f"error getting restaurants csv: {exc}") from exc

        if not resp.ok:
            body = resp.text[:200] if resp.text else ""
            logger.error("Catalog feed returned HTTP %s: %s", resp.status_code, body)
            raise feed_error(
                f"error getting restaurants, http status code: {resp.status_code}, body {body}"
            )
        return resp.content


def csv_bytes_to_records(raw: bytes) -> List[List[str]]:
    """Decode CSV bytes into rows of strings, header first."""
    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise format_error(f"catalog csv is not valid utf-8: {exc}") from exc

    try:
        records = [row for row in csv.reader(io.StringIO(text)) if row]
    except csv.Error as exc:
        raise format_error(f"error reading catalog csv: {exc}") from exc

    if len(records) < MIN_RECORDS:
        raise format_error(f"catalog csv has {len(records)} records, need at least {MIN_RECORDS}")
    return records
