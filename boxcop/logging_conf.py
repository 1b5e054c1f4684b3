"""Logging setup shared by all boxcop modules."""
import logging
import sys

from boxcop import settings

logger = logging.getLogger("boxcop")
logger.setLevel(settings.LOG_LEVEL.upper())
logger.propagate = False

if not logger.handlers:
    _stderr = logging.StreamHandler(sys.stderr)
    _stderr.setFormatter(logging.Formatter("%(asctime)s %(levelname)-7s %(name)s: %(message)s"))
    logger.addHandler(_stderr)

    # Ship to BetterStack when a source token is configured
    if settings.BETTERSTACK_SOURCE_TOKEN:
        from logtail import LogtailHandler

        if settings.BETTERSTACK_INGEST_HOST:
            _logtail = LogtailHandler(
                source_token=settings.BETTERSTACK_SOURCE_TOKEN,
                host=settings.BETTERSTACK_INGEST_HOST,
            )
        else:
            _logtail = LogtailHandler(source_token=settings.BETTERSTACK_SOURCE_TOKEN)
        logger.addHandler(_logtail)
