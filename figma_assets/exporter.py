import asyncio
import logging
from typing import Dict, List, Optional, Sequence

from .figma_client import FigmaClient
from .models import ImageExportOptions
from .retry import RetryPolicy, default_export_policy

logger = logging.getLogger(__name__)

# Node ids travel in the request line; keep well under practical URL limits
EXPORT_BATCH_SIZE = 90


def partition(node_ids: Sequence[str], batch_size: int = EXPORT_BATCH_SIZE) -> List[List[str]]:
    """Split ids into contiguous batches of at most batch_size"""
    if batch_size < 1:
        raise ValueError("batch_size must be positive")
    return [list(node_ids[i:i + batch_size]) for i in range(0, len(node_ids), batch_size)]


class BatchExporter:
    """Exports node images in bounded batches, retrying transient failures per batch.

    The export succeeds as a whole or fails as a whole: if any batch exhausts its
    retries, results from batches that already completed are discarded.
    """

    def __init__(self, client: FigmaClient, batch_size: int = EXPORT_BATCH_SIZE,
                 max_concurrent_batches: int = 4, retry_policy: Optional[RetryPolicy] = None):
        if not 1 <= batch_size <= EXPORT_BATCH_SIZE:
            raise ValueError(f"batch_size must be between 1 and {EXPORT_BATCH_SIZE}, got {batch_size}")
        self.client = client
        self.batch_size = batch_size
        self.max_concurrent_batches = max(1, max_concurrent_batches)
        self.retry_policy = retry_policy or default_export_policy()

    async def export(self, file_id: str, node_ids: Sequence[str],
                     options: Optional[ImageExportOptions] = None) -> Dict[str, str]:
        """Return node id -> image URL for every node the remote rendered"""
        if not node_ids:
            return {}

        options = options or ImageExportOptions()
        batches = partition(node_ids, self.batch_size)
        total = len(batches)
        logger.info(f"🖼️ Exporting {len(node_ids)} nodes in {total} batch(es) as {options.format}")

        semaphore = asyncio.Semaphore(self.max_concurrent_batches)

        async def run_batch(index: int, batch: List[str]) -> Dict[str, str]:
            async with semaphore:
                logger.info(f"Processing batch {index}/{total} ({len(batch)} nodes)")
                return await self.retry_policy.run(
                    lambda: self.client.submit_export_job(
                        file_id, batch, format=options.format,
                        scale=options.scale, version=options.version
                    ),
                    description=f"image export batch {index}/{total}"
                )

        tasks = [asyncio.ensure_future(run_batch(i, batch)) for i, batch in enumerate(batches, 1)]
        try:
            batch_results = await asyncio.gather(*tasks)
        except Exception:
            for task in tasks:
                task.cancel()
            raise

        images: Dict[str, str] = {}
        for batch_images in batch_results:
            for node_id, url in batch_images.items():
                images.setdefault(node_id, url)

        logger.info(f"✅ Export finished: {len(images)}/{len(node_ids)} nodes rendered")
        return images
