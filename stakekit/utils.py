"""
utils.py: terminal output helpers for the command line front-end
"""
import logging
import sys


def _color(code):
    """
    _color: returns color code that can be use inside terminal
    """
    return f"\033[{code}m"

RED = _color("31")
GREEN = _color("32")
YELLOW = _color("33")
BLUE = _color("34")
BOLD = _color("1")
RESET = _color("0")

def info(msg):
    """
    info: prints message with formatting for INFO
    """
    print(f"{BLUE}[INFO] {msg}{RESET}")

def success(msg):
    """
    success: prints message with formatting for SUCCEEDED event
    """
    print(f"{GREEN}[OK] {msg}{RESET}")

def warning(msg):
    print(f"{YELLOW}[WARNING] {msg}{RESET}")

def error(msg):
    """
    error: prints message with formatting for FAILED/ERROR event
    """
    print(f"{RED}[ERROR] {msg}{RESET}", file=sys.stderr)

def fatal(msg):
    """
    fatal: prints message with formatting for unrecoverable failure event
    """
    print(f"{RED}[FATAL] {msg}{RESET}", file=sys.stderr)

def heading(msg):
    print(f"\n{BOLD}{msg}{RESET}")


class ColorFormatter(logging.Formatter):
    """
    ColorFormatter: renders log records with the same prefixes and colors as
    the print helpers above
    """
    LEVELS = {
        logging.DEBUG: (BLUE, "DEBUG"),
        logging.INFO: (BLUE, "INFO"),
        logging.WARNING: (YELLOW, "WARNING"),
        logging.ERROR: (RED, "ERROR"),
        logging.CRITICAL: (RED, "FATAL"),
    }

    def format(self, record):
        color, label = self.LEVELS.get(record.levelno, (RESET, record.levelname))
        return f"{color}[{label}] {record.name}: {record.getMessage()}{RESET}"


def setup_logging(verbose: bool = False):
    """
    setup_logging: routes the `stakekit` logger hierarchy to stderr
    :param verbose: Log at DEBUG instead of WARNING
    """
    logger = logging.getLogger("stakekit")
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    for old in [h for h in logger.handlers if isinstance(h.formatter, ColorFormatter)]:
        logger.removeHandler(old)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(ColorFormatter())
    logger.addHandler(handler)
    return logger
