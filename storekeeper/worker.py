"""Worker process that watches stock levels.

Runs an asyncio loop that scans for low-stock items on a fixed interval and
logs a summary. Run with ``python -m storekeeper.worker``.
"""

from __future__ import annotations

import asyncio
import logging

from storekeeper.config import get_settings
from storekeeper.db import get_session_factory
from storekeeper.services.inventory import list_items
from storekeeper.services.supervisor import list_supervisor_emails

logger = logging.getLogger(__name__)


async def scan_low_stock() -> int:
    """Log every item at or below its threshold. Returns how many there were.

    Each warning lists the supervisors on file.
    """
    async with get_session_factory()() as session:
        items = await list_items(session, low_stock_only=True)
        recipients = await list_supervisor_emails(session) if items else []
    if items and not recipients:
        logger.warning("No supervisors on file to notify about low stock")
    for item in items:
        logger.warning(
            "Low stock: %s (%s) has %d left, threshold %d; notify %s",
            item.name,
            item.category_name or "uncategorized",
            item.quantity,
            item.low_stock_threshold,
            ", ".join(recipients) or "nobody",
        )
    return len(items)


async def run_low_stock_loop() -> None:
    interval = get_settings().low_stock_scan_interval_seconds
    logger.info("Low-stock worker started, scanning every %ds", interval)

    while True:
        try:
            count = await scan_low_stock()
            logger.info("Low-stock scan complete: %d item(s) need restocking", count)
        except Exception:
            logger.exception("Low-stock scan failed")
        await asyncio.sleep(interval)


def main() -> None:
    """Entry point for the worker process."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    asyncio.run(run_low_stock_loop())


if __name__ == "__main__":
    main()
