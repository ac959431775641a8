"""AWS Lambda handler serving the Campus Events page."""
import json
import logging
import os
import time
from datetime import timedelta
from typing import Dict, Any, Optional
from zoneinfo import ZoneInfo

from processor.event_processor import EventProcessor
from processor.expiry import ExpiryConfig, ExpiryPolicy
from processor.feed import EventFeed
from processor.normalizer import RowNormalizer
from renderer.calendar_links import detect_platform
from renderer.html_renderer import HtmlRenderer
from scraper.sheet_source import SheetEventSource


# Configure JSON logging
class JsonFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Configure logging with JSON formatter.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


def load_expiry_config() -> ExpiryConfig:
    """Read the visibility windows from environment variables."""
    return ExpiryConfig(
        grace_period=timedelta(hours=float(os.environ.get('GRACE_PERIOD_HOURS', '0'))),
        undated_event_window=timedelta(days=float(os.environ.get('UNDATED_WINDOW_DAYS', '3'))),
        recruitment_window=timedelta(days=float(os.environ.get('RECRUITMENT_WINDOW_DAYS', '7')))
    )


def load_source_timezone() -> Optional[ZoneInfo]:
    """Read the sheet's time zone; None means the host's local zone."""
    name = os.environ.get('SOURCE_TIMEZONE', '').strip()
    return ZoneInfo(name) if name else None


def _user_agent(event: Dict[str, Any]) -> str:
    headers = event.get('headers') or {}
    for name, value in headers.items():
        if name.lower() == 'user-agent':
            return value
    return ''


def _html_response(status_code: int, body: str) -> Dict[str, Any]:
    return {
        'statusCode': status_code,
        'headers': {'Content-Type': 'text/html; charset=utf-8'},
        'body': body
    }


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Main Lambda handler rendering the events page for one request.

    Args:
        event: API Gateway / function URL request payload
        context: Lambda context object

    Returns:
        Response dict with statusCode, headers and the rendered HTML body
    """
    source_url = os.environ.get('SOURCE_URL', '')
    source_format = os.environ.get('SOURCE_FORMAT', 'auto')
    log_level = os.environ.get('LOG_LEVEL', 'INFO')
    timeout_seconds = int(os.environ.get('TIMEOUT_SECONDS', '30'))

    setup_logging(log_level)
    logger = logging.getLogger(__name__)

    start_time = time.time()
    logger.info(
        f"Lambda execution started",
        extra={
            'source_format': source_format,
            'timeout_seconds': timeout_seconds
        }
    )

    try:
        source = SheetEventSource(
            source_url,
            source_format=source_format,
            timeout=timeout_seconds
        )
        source_tz = load_source_timezone()
        processor = EventProcessor(
            normalizer=RowNormalizer(tz=source_tz),
            policy=ExpiryPolicy(load_expiry_config())
        )
        feed = EventFeed(source, processor=processor, tz=source_tz)
        renderer = HtmlRenderer(platform=detect_platform(_user_agent(event)))

        logger.info("Running render cycle")
        result = feed.run_cycle()
        body = renderer.render(result.tree)

        duration = time.time() - start_time

        if result.errors:
            logger.error(
                f"Render cycle could not load events",
                extra={
                    'duration_seconds': round(duration, 2),
                    'errors': result.errors
                }
            )
            return _html_response(502, body)

        logger.info(
            f"Lambda execution completed successfully",
            extra={
                'duration_seconds': round(duration, 2),
                'rows_fetched': result.rows_fetched,
                'events_visible': result.events_visible
            }
        )
        return _html_response(200, body)

    except Exception as e:
        duration = time.time() - start_time

        logger.error(
            f"Lambda execution failed: {str(e)}",
            extra={
                'duration_seconds': round(duration, 2),
                'error_type': type(e).__name__
            },
            exc_info=True
        )

        return {
            'statusCode': 500,
            'body': json.dumps({
                'message': 'Render failed',
                'error': str(e),
                'error_type': type(e).__name__,
                'duration_seconds': round(duration, 2)
            })
        }
