"""Configuration management for boxcop."""
import os
import shutil
from dotenv import load_dotenv

load_dotenv()

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")
BETTERSTACK_SOURCE_TOKEN = os.getenv("BETTERSTACK_SOURCE_TOKEN")
BETTERSTACK_INGEST_HOST = os.getenv("BETTERSTACK_INGEST_HOST")

# Record store (PostgreSQL)
PG_DSN = os.getenv("PG_DSN")
DB_CONNECT_TIMEOUT = int(os.getenv("DB_CONNECT_TIMEOUT", "10"))
DB_CONNECT_ATTEMPTS = int(os.getenv("DB_CONNECT_ATTEMPTS", "3"))
DB_RECONNECT_DELAY = float(os.getenv("DB_RECONNECT_DELAY", "1.0"))
DB_MAX_RECONNECT_DELAY = float(os.getenv("DB_MAX_RECONNECT_DELAY", "30.0"))

# EOS metadata lookup (fileinfo over the MGM HTTP port)
METADATA_DOMAIN = os.getenv("METADATA_DOMAIN", "cern.ch")
METADATA_PORT = int(os.getenv("METADATA_PORT", "8000"))
METADATA_TIMEOUT = float(os.getenv("METADATA_TIMEOUT", "30.0"))
METADATA_MAX_RETRIES = int(os.getenv("METADATA_MAX_RETRIES", "5"))
METADATA_RETRY_BACKOFF = float(os.getenv("METADATA_RETRY_BACKOFF", "0.5"))

# Share path resolution
DEFAULT_CONCURRENCY = int(os.getenv("DEFAULT_CONCURRENCY", "100"))
# Overall deadline for one batch in seconds, 0 disables it
RESOLVE_TIMEOUT = float(os.getenv("RESOLVE_TIMEOUT", "0"))

PUBLIC_LINK_BASE_URL = os.getenv("PUBLIC_LINK_BASE_URL", "https://cernbox.cern.ch/index.php/s")

# Project spaces
PROJECT_ADMIN_GROUP_PREFIX = os.getenv("PROJECT_ADMIN_GROUP_PREFIX", "cernbox-project")
PROJECT_ROOT = os.getenv("PROJECT_ROOT", "/eos/project")
EOS_BINARY = os.getenv("EOS_BINARY", "eos")
# {letter} is replaced by the partition letter
EOS_PROJECT_MGM = os.getenv("EOS_PROJECT_MGM", "root://eosproject-{letter}.cern.ch")


def validate_config():
    """Validate required configuration."""
    errors = []

    if not PG_DSN:
        errors.append("PG_DSN is required")
    if DEFAULT_CONCURRENCY < 1:
        errors.append(f"DEFAULT_CONCURRENCY must be at least 1, got {DEFAULT_CONCURRENCY}")
    if METADATA_MAX_RETRIES < 0:
        errors.append(f"METADATA_MAX_RETRIES must not be negative, got {METADATA_MAX_RETRIES}")
    if DB_CONNECT_ATTEMPTS < 1:
        errors.append(f"DB_CONNECT_ATTEMPTS must be at least 1, got {DB_CONNECT_ATTEMPTS}")
    if "{letter}" not in EOS_PROJECT_MGM:
        errors.append(f"EOS_PROJECT_MGM must contain a {{letter}} placeholder, got {EOS_PROJECT_MGM!r}")

    if errors:
        raise ValueError("Configuration errors:\n  " + "\n  ".join(errors))


if __name__ == "__main__":
    try:
        validate_config()
        print("✓ Configuration is valid")
        print(f"  METADATA_DOMAIN: {METADATA_DOMAIN}:{METADATA_PORT}")
        print(f"  DEFAULT_CONCURRENCY: {DEFAULT_CONCURRENCY}")
        print(f"  PROJECT_ROOT: {PROJECT_ROOT}")
        print(f"  EOS_BINARY: {shutil.which(EOS_BINARY) or EOS_BINARY + ' (not on PATH)'}")
    except ValueError as e:
        print(f"✗ {e}")
