from rich.console import Console
from rich.logging import RichHandler
from idemix_card.config import LOG_LEVEL
import logging

# Constants
LOGGING_FORMAT = "%(message)s"
LOGGING_DATEFMT = "[%X]"

# Log records go to stderr, stdout only carries command output
console = Console(stderr=True)

# Configure logging
logging.basicConfig(
    level=LOG_LEVEL,
    format=LOGGING_FORMAT,
    datefmt=LOGGING_DATEFMT,
    handlers=[RichHandler(console=console, show_path=False, markup=False)],
)

logger = logging.getLogger("idemix_card")


def set_debug(enabled: bool) -> None:
    """Show the command/response dumps of the card transport, or hide them again."""
    logger.setLevel(logging.DEBUG if enabled else logging.NOTSET)
