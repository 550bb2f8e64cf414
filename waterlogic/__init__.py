import logging

from . import (
    canon,
    config,
    exceptions,
    types,
    utils,
    interpolate,
    transform,
    store,
    ingest,
    validate,
    importer,
    report,
    formats,
    wizard,
    logger,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "canon",
    "config",
    "exceptions",
    "types",
    "utils",
    "interpolate",
    "transform",
    "store",
    "ingest",
    "validate",
    "importer",
    "report",
    "formats",
    "wizard",
    "logger",
]
