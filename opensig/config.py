# opensig/config.py
"""
Environment-driven settings shared by the CLI and the local ledger.
"""

import logging
import os
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

LEDGER_PATH_ENV = "OPENSIG_LEDGER_PATH"
SIGNER_ENV = "OPENSIG_SIGNER"
NETWORKS_FILE_ENV = "OPENSIG_NETWORKS_FILE"
LOG_LEVEL_ENV = "OPENSIG_LOG_LEVEL"

DEFAULT_SIGNER = "0x000000000000000000000000000000000000a11c"
DEFAULT_LOG_LEVEL = "WARNING"


def get_ledger_path(flag: Optional[Path] = None) -> Path:
    """Resolve the local ledger DB path in this order:
    1. --ledger flag
    2. OPENSIG_LEDGER_PATH environment variable
    3. Default: ~/.opensig/ledger.db
    """
    if flag:
        path = flag.resolve()
    else:
        env_path = os.environ.get(LEDGER_PATH_ENV)
        if env_path:
            path = Path(env_path).resolve()
        else:
            path = Path.home() / ".opensig" / "ledger.db"

    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def get_signer(flag: Optional[str] = None) -> str:
    return flag or os.environ.get(SIGNER_ENV) or DEFAULT_SIGNER


def get_log_level(flag: Optional[str] = None) -> str:
    return (flag or os.environ.get(LOG_LEVEL_ENV) or DEFAULT_LOG_LEVEL).upper()


def load_configured_networks() -> int:
    """Register networks from OPENSIG_NETWORKS_FILE, if set. Returns how many were loaded."""
    path = os.environ.get(NETWORKS_FILE_ENV)
    if not path:
        return 0
    from opensig.network.networks import load_networks

    loaded = load_networks(path)
    logger.debug("loaded %d network(s) from %s", len(loaded), path)
    return len(loaded)
