"""Cursor pagination over a cycle's issues."""

import logging
from typing import Optional

from services import queries
from services.config import MAX_PAGES, clamp
from services.fetch_strategy import LIGHT_PAGE_SIZE
from services.linear_client import ErrorKind, classify_error

logger = logging.getLogger(__name__)


def _fetch_page(client, cycle_id: str, after: Optional[str], page_size: int) -> Optional[dict]:
    data = client.execute(
        queries.CYCLE_ISSUES_PAGE,
        {"cycleId": cycle_id, "after": after, "n": page_size},
    )
    return ((data or {}).get("cycle") or {}).get("issues")


def _log_page_error(cycle_id: str, error: Exception):
    if classify_error(error) is ErrorKind.COMPLEXITY:
        logger.warning(f"Pagination for cycle {cycle_id} stopped early, query too complex: {error}")
    else:
        logger.error(f"Pagination error for cycle {cycle_id}: {error}")


def backfill_first_page(client, cycle_id: str, first_page: dict) -> dict:
    """Re-fetch page one of a cycle with labels.

    Returns the labeled page, or first_page unchanged if the request failed.
    """
    try:
        page = _fetch_page(client, cycle_id, None, LIGHT_PAGE_SIZE)
    except Exception as e:
        logger.error(f"Label backfill failed for cycle {cycle_id}: {e}")
        return first_page

    if not page or page.get("nodes") is None:
        return first_page
    return page


def fetch_all_issues(client, cycle_id: str, first_page: Optional[dict],
                     page_size: int = 50, max_pages: int = MAX_PAGES[0],
                     backfill_labels: bool = False) -> list:
    """Collect every issue node in a cycle starting from an already-fetched page.

    Stops when Linear reports no more pages, a page comes back empty, max_pages
    follow-up requests were made, or the cursor stops advancing. Errors on a
    follow-up page end pagination and keep what was already collected.

    Args:
        client: LinearClient (or anything with a compatible execute method)
        cycle_id: Cycle to page through
        first_page: {"nodes": [...], "pageInfo": {"hasNextPage", "endCursor"}}
        page_size: Issues per follow-up request
        max_pages: Cap on follow-up requests, clamped to [1, 1000]
        backfill_labels: Re-fetch page one with labels before continuing

    Returns:
        List of raw issue nodes
    """
    max_pages = clamp(max_pages, MAX_PAGES[1], MAX_PAGES[2])
    first_page = first_page or {}

    if backfill_labels:
        first_page = backfill_first_page(client, cycle_id, first_page)

    all_nodes = list(first_page.get("nodes") or [])
    page_info = first_page.get("pageInfo") or {}
    has_next = bool(page_info.get("hasNextPage"))
    cursor = page_info.get("endCursor")
    pages_fetched = 0

    while has_next:
        if not cursor:
            logger.warning(f"Cycle {cycle_id} reported more pages without a cursor, stopping pagination")
            break
        if pages_fetched >= max_pages:
            logger.warning(f"Cycle {cycle_id} hit the {max_pages} page limit; issue totals may be undercounted")
            break

        try:
            page = _fetch_page(client, cycle_id, cursor, page_size)
        except Exception as e:
            _log_page_error(cycle_id, e)
            break
        pages_fetched += 1

        nodes = (page or {}).get("nodes") or []
        if not nodes:
            break
        all_nodes.extend(nodes)

        page_info = page.get("pageInfo") or {}
        next_cursor = page_info.get("endCursor")
        if next_cursor == cursor:
            logger.warning(f"Cursor for cycle {cycle_id} did not advance, stopping pagination")
            break

        has_next = bool(page_info.get("hasNextPage"))
        cursor = next_cursor

    return all_nodes
