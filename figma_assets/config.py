import os
import logging
from typing import Optional

from .exporter import EXPORT_BATCH_SIZE
from .figma_client import DEFAULT_API_BASE
from .retry import MAX_ATTEMPTS

logger = logging.getLogger(__name__)


class Config:
    """Configuration management using environment variables"""

    def __init__(self, figma_token: Optional[str] = None):
        # Figma configuration; an explicit token wins over the environment
        self.figma_token = figma_token or os.getenv('FIGMA_TOKEN') or os.getenv('FIGMA_API_TOKEN')
        self.api_base = os.getenv('FIGMA_API_BASE', DEFAULT_API_BASE)

        # Optional configurations
        self.log_level = os.getenv('LOG_LEVEL', 'INFO')
        self.log_file = os.getenv('LOG_FILE') or None
        self.max_retries = int(os.getenv('MAX_RETRIES', str(MAX_ATTEMPTS)))
        self.request_timeout = float(os.getenv('REQUEST_TIMEOUT', '30'))

        # Export batching
        self.export_batch_size = int(os.getenv('EXPORT_BATCH_SIZE', str(EXPORT_BATCH_SIZE)))
        self.max_concurrent_batches = int(os.getenv('MAX_CONCURRENT_BATCHES', '4'))

    def validate(self) -> bool:
        """Validate that required configuration is present and within limits"""
        required_vars = [
            ('FIGMA_TOKEN', self.figma_token),
        ]

        missing_vars = [var_name for var_name, var_value in required_vars if not var_value]

        if missing_vars:
            logger.error(f"Missing required environment variables: {', '.join(missing_vars)}")
            return False

        # Both limits are ceilings: configuration may lower them, never raise them
        if not 1 <= self.export_batch_size <= EXPORT_BATCH_SIZE:
            logger.error(f"EXPORT_BATCH_SIZE must be between 1 and {EXPORT_BATCH_SIZE}, "
                         f"got {self.export_batch_size}")
            return False

        if not 1 <= self.max_retries <= MAX_ATTEMPTS:
            logger.error(f"MAX_RETRIES must be between 1 and {MAX_ATTEMPTS}, got {self.max_retries}")
            return False

        return True
