# remmy_notify/core/logging.py
# Logs de una línea a stdout; el host de funciones los recoge tal cual.

import logging
import sys

_FMT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def setup_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level.upper())

    h = logging.StreamHandler(sys.stdout)
    h.setFormatter(logging.Formatter(_FMT, datefmt="%Y-%m-%d %H:%M:%S"))
    root.addHandler(h)

    # httpx loguea cada request en INFO (incluye URLs con project id)
    logging.getLogger("httpx").setLevel(logging.WARNING)
