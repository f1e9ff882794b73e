from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from .models import Page, Record

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaginationResult:
    records: List[Record]
    pages: int
    cursor: Optional[str]


def collect_records(
    fetch_page: Callable[[Optional[str]], Page],
    auto_paginate: bool,
    max_pages: Optional[int] = None,
) -> PaginationResult:
    """Fetch pages sequentially, feeding each cursor into the next call.

    With ``auto_paginate`` off exactly one page is fetched, even if it reports
    a cursor. With it on, fetching stops when no cursor comes back, or after
    ``max_pages`` pages when a positive cap is given. The returned ``cursor``
    is the one left unfollowed, if any.
    """
    records: List[Record] = []
    cursor: Optional[str] = None
    pages = 0

    while True:
        logger.debug("Fetching records with offset: %s", cursor)
        page = fetch_page(cursor)
        pages += 1
        records.extend(page.records)
        cursor = page.cursor
        logger.debug("Fetched %d records in this page, total: %d", len(page.records), len(records))

        if cursor is None or not auto_paginate:
            break
        if max_pages and pages >= max_pages:
            logger.warning(
                "Stopping pagination after %d pages with more records available", pages
            )
            break

    return PaginationResult(records=records, pages=pages, cursor=cursor)
