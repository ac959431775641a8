"""Event source reading rows from a published spreadsheet."""
import csv
import io
import json
import logging
import time
from typing import Any, Dict, List

import requests

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """Raised when the raw rows cannot be retrieved or decoded."""


def parse_csv_rows(text: str) -> List[Dict[str, str]]:
    """
    Parse a delimited-text table whose first row is the header.

    Args:
        text: CSV payload

    Returns:
        List of rows keyed by header name; short rows are padded with ""
    """
    reader = csv.reader(io.StringIO(text))
    header = None
    rows = []

    for record in reader:
        if not any(cell.strip() for cell in record):
            continue
        if header is None:
            header = [cell.strip() for cell in record]
            continue
        padded = record + [''] * (len(header) - len(record))
        rows.append(dict(zip(header, padded)))

    return rows


def parse_json_rows(text: str) -> List[Dict[str, Any]]:
    """
    Parse a JSON array of field-named objects.

    Args:
        text: JSON payload, either an array or an object with a
            "data" or "rows" array

    Returns:
        List of row dictionaries

    Raises:
        ValueError: If the payload is not a list of objects
    """
    payload = json.loads(text)

    if isinstance(payload, dict):
        payload = payload.get('data', payload.get('rows'))

    if not isinstance(payload, list):
        raise ValueError("Expected a JSON array of rows")
    if not all(isinstance(row, dict) for row in payload):
        raise ValueError("Expected every JSON row to be an object")

    return payload


class SheetEventSource:
    """Source fetching raw event rows from a CSV or JSON endpoint."""

    FORMATS = ('auto', 'csv', 'json')

    def __init__(
        self,
        url: str,
        source_format: str = 'auto',
        timeout: int = 30,
        max_retries: int = 3
    ):
        """
        Initialize the event source.

        Args:
            url: Published CSV or JSON endpoint
            source_format: "csv", "json" or "auto" (default: "auto")
            timeout: HTTP request timeout in seconds (default: 30)
            max_retries: Attempts for connection errors and timeouts (default: 3)
        """
        if source_format not in self.FORMATS:
            raise ValueError(f"Unsupported source format: {source_format}")
        self.url = url
        self.source_format = source_format
        self.timeout = timeout
        self.max_retries = max_retries

    def fetch_rows(self) -> List[Dict[str, Any]]:
        """
        Fetch and decode all raw rows.

        Returns:
            List of raw row dictionaries

        Raises:
            FetchError: On transport failure, non-success status or
                malformed payload
        """
        logger.info(f"Fetching event rows from {self.url}")

        response = self._fetch_response()

        try:
            rows = self._decode(response)
        except (ValueError, csv.Error) as e:
            logger.error(f"Malformed payload from {self.url}: {e}")
            raise FetchError(f"Malformed payload: {e}") from e

        logger.info(f"Successfully fetched {len(rows)} rows")
        return rows

    def _fetch_response(self) -> requests.Response:
        """
        Fetch the payload, retrying only connection errors and timeouts.

        A non-success HTTP status is final and is not retried.

        Returns:
            Successful response

        Raises:
            FetchError: On a non-success status, a non-transient request
                error, or when every retry attempt fails
        """
        base_delay = 1  # seconds

        for attempt in range(self.max_retries):
            try:
                logger.info(
                    f"Fetching event rows (attempt {attempt + 1}/{self.max_retries})"
                )
                response = requests.get(
                    self.url,
                    headers={'Cache-Control': 'no-store'},
                    timeout=self.timeout
                )

            except (requests.ConnectionError, requests.Timeout) as e:
                if attempt < self.max_retries - 1:
                    # Calculate exponential backoff delay
                    delay = base_delay * (2 ** attempt)
                    logger.warning(
                        f"Request failed (attempt {attempt + 1}/{self.max_retries}): {e}. "
                        f"Retrying in {delay} seconds..."
                    )
                    time.sleep(delay)
                    continue
                logger.error(
                    f"All {self.max_retries} retry attempts failed. Last error: {e}"
                )
                raise FetchError(f"Failed to fetch event rows: {e}") from e

            except requests.RequestException as e:
                logger.error(f"Request to {self.url} failed: {e}")
                raise FetchError(f"Failed to fetch event rows: {e}") from e

            try:
                response.raise_for_status()
            except requests.HTTPError as e:
                logger.error(f"Event source returned HTTP {response.status_code}")
                raise FetchError(f"Failed to fetch event rows: {e}") from e
            return response

        raise FetchError("No fetch attempts were made")

    def _decode(self, response: requests.Response) -> List[Dict[str, Any]]:
        """Decode the response body according to the configured format."""
        text = response.text
        source_format = self.source_format

        if source_format == 'auto':
            content_type = response.headers.get('Content-Type', '')
            if 'json' in content_type or text.lstrip().startswith(('[', '{')):
                source_format = 'json'
            else:
                source_format = 'csv'

        if source_format == 'json':
            return parse_json_rows(text)
        return parse_csv_rows(text)
