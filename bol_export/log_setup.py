# bol_export/log_setup.py
from __future__ import annotations

import logging
from pathlib import Path

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def setup_logging(level: str = "INFO", file: str | Path | None = None) -> logging.Logger:
    """Consola (y archivo opcional) en el logger raíz. Se puede llamar más de una vez."""
    root = logging.getLogger()
    level_no = getattr(logging, str(level).upper(), logging.INFO)
    root.setLevel(level_no)

    for h in list(root.handlers):
        if getattr(h, "_bol_export", False):
            root.removeHandler(h)
            h.close()

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if file:
        p = Path(file)
        p.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(p, encoding="utf-8"))

    for h in handlers:
        h.setFormatter(logging.Formatter(LOG_FORMAT))
        h._bol_export = True  # type: ignore[attr-defined]
        root.addHandler(h)

    # urllib3 es muy verboso en DEBUG
    logging.getLogger("urllib3").setLevel(max(level_no, logging.INFO))
    return root
