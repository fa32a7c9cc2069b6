from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from config import APP_DIR


def setup_logging(level: Optional[int] = None, log_dir: Optional[Path] = None) -> None:
    if level is None:
        level = logging.DEBUG if os.environ.get("QUICKDICTATE_DEBUG") == "1" else logging.INFO
    log_dir = log_dir or APP_DIR
    log_dir.mkdir(parents=True, exist_ok=True)
    handlers = [
        logging.FileHandler(log_dir / "quickdictate.log", encoding="utf-8"),
        logging.StreamHandler(),
    ]
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        handlers=handlers,
        force=True,
    )
