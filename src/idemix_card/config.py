from typing import Optional
import os

###
# Runtime Configuration, Read From The Environment
###


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Dump every command/response pair and its round-trip time
VERBOSE = _env_flag("IDEMIX_CARD_VERBOSE", True)

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def _log_level(value: Optional[str]) -> str:
    """Normalize a level name, unknown or missing names fall back to INFO."""
    if value is None:
        return "INFO"
    level = value.strip().upper()
    return level if level in LOG_LEVELS else "INFO"


# Level handed to the rich logging handler
LOG_LEVEL = _log_level(os.environ.get("IDEMIX_CARD_LOG_LEVEL"))

# Substring of the PC/SC reader name to connect to, empty picks the first reader
READER_NAME = os.environ.get("IDEMIX_CARD_READER", "")

# The applet keeps a single issuance/proof context
# TODO: derive the session id from the credential once the applet multiplexes contexts
SESSION_ID = 1
