"""
Logging configuration and utilities for the quote engine.

Quote requests and their outcomes get their own log stream; everything else
goes to the application log. Lines are plain text or one JSON object each.
"""

import logging
import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
from decimal import Decimal


class JSONFormatter(logging.Formatter):
    """
    Formatter writing each record as a single JSON object.

    Quote context passed through ``extra`` is copied into the object when present.
    """

    EXTRA_FIELDS = ("order_id", "pair", "side", "status", "request_id", "execution_time_ms")

    def format(self, record: logging.LogRecord) -> str:
        """Serialize the record and its quote context."""
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for name in self.EXTRA_FIELDS:
            if hasattr(record, name):
                log_data[name] = str(getattr(record, name))

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


class QuoteEngineLogger:
    """
    Centralized logger for the quote engine.

    Quote requests and outcomes go to a dedicated "quotes" child logger so
    they can be written to their own file.
    """

    def __init__(
        self,
        name: str = "QuoteEngine",
        log_level: str = "INFO",
        log_dir: Optional[Path] = None,
        use_json: bool = False,
    ):
        """
        Initialize the quote engine logger.

        Args:
            name: Logger name
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files (None for console only)
            use_json: Use JSON formatting (for production)
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, log_level.upper()))
        self.logger.handlers.clear()

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.DEBUG)
        console_handler.setFormatter(self._formatter(use_json))
        self.logger.addHandler(console_handler)

        if log_dir:
            log_dir = Path(log_dir)
            log_dir.mkdir(parents=True, exist_ok=True)

            self.logger.addHandler(
                self._create_file_handler(log_dir / "application.log", use_json)
            )

            self.quote_logger = logging.getLogger(f"{name}.quotes")
            self.quote_logger.setLevel(logging.INFO)
            self.quote_logger.handlers.clear()
            self.quote_logger.addHandler(
                self._create_file_handler(log_dir / "quotes.log", use_json)
            )

            error_handler = self._create_file_handler(log_dir / "errors.log", use_json)
            error_handler.setLevel(logging.ERROR)
            self.logger.addHandler(error_handler)
        else:
            self.quote_logger = self.logger

    @staticmethod
    def _formatter(use_json: bool) -> logging.Formatter:
        if use_json:
            return JSONFormatter()
        return logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    def _create_file_handler(self, filepath: Path, use_json: bool) -> logging.FileHandler:
        """Create a file handler with appropriate formatter."""
        handler = logging.FileHandler(filepath)
        handler.setFormatter(self._formatter(use_json))
        return handler

    def log_quote_request(
        self,
        order_id: str,
        pair: str,
        side: str,
        amount: Decimal,
        quantity_specified: bool,
        price_limit: Optional[Decimal] = None,
    ):
        """Log an incoming quote request."""
        unit = "quantity" if quantity_specified else "value"
        limit = f" limit {price_limit}" if price_limit is not None else ""
        msg = f"Quote requested: {side} {unit} {amount} {pair}{limit}"
        self.quote_logger.info(msg, extra={"order_id": order_id, "pair": pair, "side": side})

    def log_quote_result(
        self,
        order_id: str,
        pair: str,
        status: str,
        pay: Optional[Decimal] = None,
        receive: Optional[Decimal] = None,
        fee: Optional[Decimal] = None,
        execution_time_ms: Optional[float] = None,
    ):
        """Log the outcome of a quote."""
        extra = {
            "order_id": order_id,
            "pair": pair,
            "status": status,
            "execution_time_ms": execution_time_ms,
        }
        if pay is not None:
            msg = f"Quote {status}: pay {pay}, receive {receive}, fee {fee} ({pair})"
        else:
            msg = f"Quote {status} ({pair})"
        self.quote_logger.info(msg, extra=extra)

    def log_insufficient_liquidity(self, order_id: str, pair: str, reason: str):
        """Log a quote the book could not fill."""
        self.quote_logger.info(
            f"No quote for {order_id} on {pair}: {reason}",
            extra={"order_id": order_id, "pair": pair, "status": "INSUFFICIENT_LIQUIDITY"},
        )

    def log_error(self, message: str, exception: Optional[Exception] = None, **context):
        """Log an error to the application and error logs, with its traceback when given."""
        self.logger.error(message, exc_info=exception, extra=context)


# Global logger instance
_logger: Optional[QuoteEngineLogger] = None


def get_logger(
    name: str = "QuoteEngine",
    log_level: str = "INFO",
    log_dir: Optional[Path] = None,
    use_json: bool = False,
) -> QuoteEngineLogger:
    """
    Get or create the global logger instance.

    Args:
        name: Logger name
        log_level: Logging level
        log_dir: Directory for log files
        use_json: Use JSON formatting

    Returns:
        QuoteEngineLogger instance
    """
    global _logger

    if _logger is None:
        _logger = QuoteEngineLogger(name, log_level, log_dir, use_json)

    return _logger
