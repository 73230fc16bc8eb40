import re
import sys
import logging
from pathlib import Path
from typing import Optional


def css_class_name(name: str) -> str:
    """Turn a node name into a CSS class name"""
    return re.sub(r'\s+', '-', name.lower())


def setup_logging(log_level: str = 'INFO', log_file: Optional[str] = None):
    """Setup logging configuration

    Console output goes to stderr; stdout belongs to the MCP stdio transport.
    """
    log_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    handlers = [logging.StreamHandler(sys.stderr)]

    if log_file:
        log_dir = Path(log_file).parent
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format=log_format,
        handlers=handlers,
        force=True
    )
