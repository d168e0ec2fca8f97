"""Zotero Web API collection fetching: URL building and paginated aggregation."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import requests

from config import PublicationsConfig, load_config
from dataset import AggregatedDataset
from errors import MalformedResponseError, TransportError
from models import Page
from normalizer import process_response, validate_page

REQUEST_HEADERS = {"Accept": "application/json"}

LOGGER = logging.getLogger(__name__)


def build_endpoint_url(endpoint: str, config: PublicationsConfig) -> str:
    """Build the first-page URL for ``endpoint`` (e.g. ``users/475425/publications/items``).

    Items are ordered most-recently-modified first; ``start`` is always 0.
    """
    params = {
        "include": ",".join(config.include),
        "limit": config.limit,
        "linkwrap": 1,
        "order": "dateModified",
        "sort": "desc",
        "start": 0,
        "style": config.citation_style,
    }
    path = endpoint.strip().lstrip("/")
    api_base = config.api_base.strip().rstrip("/")
    return f"{config.scheme}://{api_base}/{path}?{urlencode(params, safe=',')}"


def fetch_until_exhausted(
    url: str,
    page_size: int,
    headers: dict[str, str] | None = None,
    max_items: int | None = None,
    timeout: float | None = None,
) -> list[dict[str, Any]]:
    """Fetch every page of ``url`` sequentially and return the merged raw items.

    A ``Link: rel="next"`` header is followed when present. Without a Link
    header, a page shorter than ``page_size`` ends the run; otherwise the
    ``start`` parameter is advanced by the number of items received.

    Any failing page aborts the whole run: no partial list is returned.
    """
    if page_size < 1:
        raise ValueError(f"page_size must be >= 1, got {page_size}")

    items: list[dict[str, Any]] = []
    next_url: str | None = url
    start = _start_offset(url)
    pages = 0

    while next_url:
        page = _fetch_page(next_url, headers or REQUEST_HEADERS, timeout)
        pages += 1
        items.extend(page.items)

        LOGGER.info(
            "Zotero fetch: page=%s start=%s count=%s total_so_far=%s total_results=%s",
            pages,
            start,
            len(page.items),
            len(items),
            page.total_results,
        )

        if max_items is not None and len(items) >= max_items:
            del items[max_items:]
            break
        if not page.items:
            break

        if page.next_url:
            next_url = page.next_url
            start = _start_offset(next_url)
        elif page.has_link_header or len(page.items) < page_size:
            next_url = None
        else:
            start += len(page.items)
            next_url = _with_start(next_url, start)

    LOGGER.info("Zotero fetch: pages=%s items=%s max_items=%s", pages, len(items), max_items)
    return items


def fetch_all(endpoint: str, config: PublicationsConfig | None = None) -> AggregatedDataset:
    """Fetch, normalize and (optionally) group the whole collection at ``endpoint``.

    Raises:
        TransportError: a page request failed.
        MalformedResponseError: a page or item failed validation.
        NotImplementedError: ``config.group`` is ``"collection"``.
    """
    config = config or load_config()
    url = build_endpoint_url(endpoint, config)

    raw_items = fetch_until_exhausted(
        url,
        page_size=config.limit,
        headers=REQUEST_HEADERS,
        max_items=config.max_items,
        timeout=config.timeout_seconds,
    )
    records = process_response(raw_items, config)
    dataset = AggregatedDataset(records)

    if config.group == "type":
        dataset.group_by_type(config.expand)
    elif config.group == "collection":
        dataset.group_by_collection()

    LOGGER.info(
        "Zotero fetch: endpoint=%s raw_count=%s records=%s mode=%s",
        endpoint,
        len(raw_items),
        dataset.size,
        dataset.mode,
    )
    return dataset


def _fetch_page(url: str, headers: dict[str, str], timeout: float | None) -> Page:
    try:
        response = requests.get(url, headers=headers, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as exc:
        status = getattr(getattr(exc, "response", None), "status_code", None)
        raise TransportError(f"Zotero fetch failed for {url}: {exc}", url=url, status_code=status) from exc

    try:
        payload = response.json()
    except ValueError as exc:
        raise MalformedResponseError(f"Zotero response for {url} is not valid JSON") from exc

    links = response.links or {}
    return Page(
        items=validate_page(payload),
        next_url=(links.get("next") or {}).get("url"),
        has_link_header=bool(links),
        total_results=_as_int(response.headers.get("Total-Results")),
    )


def _start_offset(url: str) -> int:
    query = dict(parse_qsl(urlsplit(url).query))
    return _as_int(query.get("start")) or 0


def _with_start(url: str, start: int) -> str:
    parts = urlsplit(url)
    query = [(name, value) for name, value in parse_qsl(parts.query, keep_blank_values=True) if name != "start"]
    query.append(("start", str(start)))
    return urlunsplit(parts._replace(query=urlencode(query, safe=",")))


def _as_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
