import logging
import time
from typing import Optional


def setup_logger(name: str = "launcher", level: str = "INFO") -> logging.Logger:
    """Setup standardized logger for launcher modules with UTF-8 support."""
    logger = logging.getLogger(name)

    if not logger.handlers:  # Avoid duplicate handlers
        handler = logging.StreamHandler()
        # Bookmark names are arbitrary unicode
        if hasattr(handler.stream, 'reconfigure'):
            handler.stream.reconfigure(encoding='utf-8')

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    return logger


def log_dispatch(logger: logging.Logger,
                 session_id: Optional[str],
                 buffer: str,
                 mode: str,
                 kind: str,
                 target: str,
                 success: bool,
                 duration_ms: float,
                 fast_path: bool = False,
                 kept_open: bool = False,
                 error: Optional[str] = None) -> None:
    """Log one committed action in a structured format."""

    log_data = {
        "session_id": session_id,
        "buffer": buffer,
        "mode": mode,
        "kind": kind,
        "target": _truncate(target),
        "success": success,
        "duration_ms": round(duration_ms, 1)
    }

    if fast_path:
        log_data["fast_path"] = True

    if kept_open:
        log_data["kept_open"] = True

    if error:
        log_data["error"] = error

    status_icon = "✅" if success else "❌"
    action_desc = kind.replace("-", " ").title()

    if error:
        logger.error(f"{status_icon} {action_desc}: {log_data}")
    else:
        logger.info(f"{status_icon} {action_desc}: {log_data}")


def _truncate(value: str, limit: int = 200) -> str:
    if value and len(value) > limit:
        return value[:limit - 3] + "..."
    return value


def create_session_id() -> str:
    """Create unique session ID for tracking one open overlay."""
    return f"session_{int(time.time() * 1000)}"
