"""Pin list aggregation across the provider's paged listing API."""

import asyncio
from typing import Any

import pydantic
import structlog

from pinning.client import PinningClient
from pinning.config import Settings
from pinning.errors import PinningError
from pinning.models import FileRecord, ListResult, PinStatus

logger = structlog.get_logger()


def parse_rows(rows: list[dict[str, Any]], status: PinStatus | None = None) -> list[FileRecord]:
    """Convert pinList rows to records, skipping rows that fail validation."""
    records = []
    for row in rows:
        try:
            records.append(FileRecord.from_provider_row(row, status))
        except pydantic.ValidationError as e:
            logger.warning(
                "pin_row_skipped",
                cid=row.get("ipfs_pin_hash"),
                errors=e.error_count(),
            )
    return records


class PinLister:
    """Accumulates pin list pages into a single record list."""

    def __init__(self, client: PinningClient, settings: Settings):
        """Initialize lister.

        Args:
            client: Client used for the page requests
            settings: Supplies page size, page cap and timeouts
        """
        self.client = client
        self.page_limit = settings.page_limit
        self.max_pages = settings.max_pages
        self.unpinned_timeout = settings.unpinned_timeout

    def list_records(self, target_count: int = 1000, status: str = "all") -> ListResult:
        """Collect pinned records page by page.

        Stops on an empty page, a short page, or once ``target_count`` rows
        are held. Rows beyond ``target_count`` from the last page are kept.
        After ``max_pages`` requests the result is marked truncated.

        Args:
            target_count: Number of rows wanted
            status: Provider status filter, 'all' for no filter

        Returns:
            ListResult; on any page failure a failed result carrying the
            provider's message
        """
        records: list[FileRecord] = []
        offset = 0
        truncated = False
        label = PinStatus(status) if status in ("pinned", "unpinned") else None

        logger.info("pin_listing_started", target_count=target_count, status=status)
        try:
            for _ in range(self.max_pages):
                page = self.client.fetch_pin_page(offset, self.page_limit, status=status)
                rows = page.get("rows") or []
                if not rows:
                    break

                records.extend(parse_rows(rows, label))
                offset += self.page_limit

                if len(records) >= target_count or len(rows) < self.page_limit:
                    break
            else:
                truncated = True
                logger.warning(
                    "pin_listing_truncated",
                    max_pages=self.max_pages,
                    records=len(records),
                )
        except PinningError as e:
            logger.error("pin_listing_failed", offset=offset, error=str(e))
            return ListResult.failure(str(e))

        logger.info("pin_listing_finished", records=len(records), truncated=truncated)
        return ListResult(records=records, truncated=truncated)

    def list_unpinned(self, limit: int = 100) -> ListResult:
        """Fetch a single page of unpinned records."""
        try:
            page = self.client.fetch_pin_page(
                0,
                limit,
                status="unpinned",
                timeout=self.unpinned_timeout,
            )
        except PinningError as e:
            logger.error("unpinned_listing_failed", error=str(e))
            return ListResult.failure(str(e))

        rows = page.get("rows") or []
        return ListResult(records=parse_rows(rows, PinStatus.UNPINNED))

    async def list_all(self, limit: int = 1000) -> ListResult:
        """List pinned and unpinned records concurrently.

        A failed side contributes no rows; the combined result still succeeds.
        """
        loop = asyncio.get_running_loop()
        pinned, unpinned = await asyncio.gather(
            loop.run_in_executor(None, self.list_records, limit, "all"),
            loop.run_in_executor(None, self.list_unpinned, limit),
        )

        pinned_rows = pinned.records if pinned.success else []
        unpinned_rows = unpinned.records if unpinned.success else []
        logger.info(
            "combined_listing_finished",
            pinned=len(pinned_rows),
            unpinned=len(unpinned_rows),
        )
        return ListResult(
            records=pinned_rows + unpinned_rows,
            truncated=pinned.truncated,
            pinned_count=len(pinned_rows),
            unpinned_count=len(unpinned_rows),
        )
