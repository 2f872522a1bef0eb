from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path
from typing import Any, Dict, Optional

DEFAULT_FMT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"


def setup_logging(cfg: Optional[Dict[str, Any]] = None, *, force: bool = False) -> None:
    """Initialize root logging once. Safe to call multiple times if force=False."""
    root = logging.getLogger()
    if root.handlers and not force:
        return

    cfg = cfg or {}
    log_cfg = cfg.get("logging") or {}

    level_name = str(log_cfg.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = log_cfg.get("fmt", DEFAULT_FMT)
    datefmt = log_cfg.get("datefmt", DEFAULT_DATEFMT)
    formatter = logging.Formatter(fmt=fmt, datefmt=datefmt)

    handlers = []

    # Console
    if log_cfg.get("console", True):
        ch = logging.StreamHandler()
        ch.setFormatter(formatter)
        handlers.append(ch)

    # Rotating file
    file_path = log_cfg.get("file")
    if file_path:
        fp = Path(file_path)
        fp.parent.mkdir(parents=True, exist_ok=True)
        rotate_cfg = log_cfg.get("rotate", {}) or {}
        max_bytes = int(rotate_cfg.get("max_bytes", 10_485_760))  # 10MB
        backup_count = int(rotate_cfg.get("backup_count", 5))
        fh = logging.handlers.RotatingFileHandler(
            filename=str(fp),
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        fh.setFormatter(formatter)
        handlers.append(fh)

    if not handlers:
        handlers.append(logging.NullHandler())

    logging.basicConfig(level=level, handlers=handlers, force=force)

    # spaCy/thinc chatter is not useful at INFO
    for noisy in log_cfg.get("quiet", ["spacy", "thinc"]):
        logging.getLogger(noisy).setLevel(logging.WARNING)


__all__ = ["setup_logging", "DEFAULT_FMT", "DEFAULT_DATEFMT"]
