import logging
import re
import sys

from opentelemetry._logs import set_logger_provider
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor, ConsoleLogRecordExporter

from .config import settings

_PEM_BLOCK = re.compile(
    r"-----BEGIN ([A-Z ]+)-----.*?-----END \1-----",
    re.DOTALL,
)


class PemRedactionFilter(logging.Filter):
    """Replaces PEM armoured blocks in log messages and extras with a marker.

    Key material must never reach a log sink, even when an exception message
    echoes user input.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str) and "-----BEGIN" in record.msg:
            record.msg = redact_pem(record.msg)
        for name, value in list(record.__dict__.items()):
            if isinstance(value, str) and "-----BEGIN" in value:
                setattr(record, name, redact_pem(value))
        return True


def redact_pem(text: str) -> str:
    return _PEM_BLOCK.sub(lambda m: f"[REDACTED {m.group(1)}]", text)


def setup_logging() -> None:
    """Configure OpenTelemetry logging with a console exporter."""

    logger_provider = LoggerProvider()
    logger_provider.add_log_record_processor(BatchLogRecordProcessor(ConsoleLogRecordExporter()))
    set_logger_provider(logger_provider)

    root = logging.getLogger()
    redaction = PemRedactionFilter()

    # Route standard python logging calls into OTel
    handler = LoggingHandler(
        level=getattr(logging, settings.LOG_LEVEL), logger_provider=logger_provider
    )
    handler.addFilter(redaction)
    root.addHandler(handler)
    root.setLevel(settings.LOG_LEVEL)

    # Plain stream output so startup messages are visible before the batch flushes
    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    stream_handler.addFilter(redaction)
    root.addHandler(stream_handler)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
