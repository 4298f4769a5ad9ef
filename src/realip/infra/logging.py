"""Process-wide log output for the realip server.

``setup_logging`` installs one stdout handler shared by the root logger
and uvicorn's loggers.  ``LoggingConfig.json_output`` picks the format:
one JSON object per line for log shippers, or uvicorn's coloured
formatter when running locally.

The resolver modules only log at DEBUG (dropped forwarding entries,
skipped ``Forwarded`` elements), so raising ``LoggingConfig.level`` to
DEBUG is how an operator sees why a header was ignored.  Records carry
``trace_id`` / ``span_id`` from the active OpenTelemetry span, empty
outside a span.
"""

from __future__ import annotations

import logging
import sys

from opentelemetry import trace

from realip.configs.system import LoggingConfig

_UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")
_EMPTY_SPAN_FIELDS = {"trace_id": "", "span_id": ""}

_JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s %(trace_id)s %(span_id)s"
_JSON_RENAMES = {"asctime": "timestamp", "levelname": "level", "name": "logger"}

_DEV_FORMAT = "%(levelprefix)s %(asctime)s %(name)s  %(message)s"
_DEV_DATEFMT = "%H:%M:%S"


class _SpanFieldsFilter(logging.Filter):
    """Stamps each record with the ids of the current OpenTelemetry span."""

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = trace.get_current_span().get_span_context()
        if ctx and ctx.is_valid:
            fields = {
                "trace_id": format(ctx.trace_id, "032x"),
                "span_id": format(ctx.span_id, "016x"),
            }
        else:
            fields = _EMPTY_SPAN_FIELDS
        for key, value in fields.items():
            setattr(record, key, value)
        return True


def _build_formatter(config: LoggingConfig) -> logging.Formatter:
    if config.json_output:
        from pythonjsonlogger.json import JsonFormatter

        return JsonFormatter(
            fmt=_JSON_FORMAT,
            rename_fields=_JSON_RENAMES,
            defaults=dict(_EMPTY_SPAN_FIELDS),
        )

    from uvicorn.logging import DefaultFormatter

    return DefaultFormatter(fmt=_DEV_FORMAT, datefmt=_DEV_DATEFMT, use_colors=True)


def setup_logging(config: LoggingConfig | None = None) -> None:
    """Route root and uvicorn logging through one stdout handler.

    Call once from ``realip.app.main`` before the server starts; calling
    again replaces the handler instead of adding a second one.
    """
    config = config or LoggingConfig()

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(_SpanFieldsFilter())
    handler.setFormatter(_build_formatter(config))

    root = logging.getLogger()
    root.setLevel(config.level.upper())
    root.handlers = [handler]

    # uvicorn installs its own handlers; replace them so output is not doubled.
    for name in _UVICORN_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers = [handler]
        server_logger.propagate = False

    logging.getLogger("opentelemetry").setLevel(logging.WARNING)
