# app/core/logging.py

"""Configuração única de logging da aplicação.

Os módulos usam ``logging.getLogger(__name__)`` e herdam daqui o nível e o
formato, definidos por ``LOG_LEVEL``.
"""

import logging
import sys
from typing import Optional

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "INFO", format_string: Optional[str] = None) -> logging.Logger:
    """Configura o root logger com um handler de console.

    Args:
        level: DEBUG, INFO, WARNING, ERROR ou CRITICAL. Valores desconhecidos viram INFO.
        format_string: formato customizado; usa ``DEFAULT_FORMAT`` se omitido.

    Returns:
        O root logger configurado.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Evita handlers duplicados quando a app é recriada (ex.: reload)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(
        logging.Formatter(format_string or DEFAULT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    )
    root_logger.addHandler(console_handler)

    return root_logger
