"""NCBI E-utilities client: esearch for recent PMIDs, efetch for records."""

from __future__ import annotations

import logging
import os
from typing import Any
from xml.etree import ElementTree

import requests

from models import Article
from normalizer import parse_records

EUTILS_BASE_URL = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils"
ESEARCH_URL = f"{EUTILS_BASE_URL}/esearch.fcgi"
EFETCH_URL = f"{EUTILS_BASE_URL}/efetch.fcgi"
REQUEST_TIMEOUT_SECONDS = 30
SEARCH_WINDOW_DAYS = 7

LOGGER = logging.getLogger(__name__)


def search_ids(term: str, max_results: int) -> list[str]:
    """Return PMIDs published within the trailing window that match term.

    Any transport error or non-200 status yields an empty list so the caller's
    loop carries on.
    """
    params = {
        "db": "pubmed",
        "term": term,
        "retmode": "json",
        "retmax": max_results,
        "reldate": SEARCH_WINDOW_DAYS,
        "datetype": "pdat",
        **_ncbi_identity(),
    }

    try:
        response = requests.get(ESEARCH_URL, params=params, timeout=REQUEST_TIMEOUT_SECONDS)
        response.raise_for_status()
        payload = response.json()
    except (requests.RequestException, ValueError) as exc:
        LOGGER.warning("PubMed search failed for term=%r, treating as empty: %s", term, exc)
        return []

    ids = _parse_id_list(payload)[:max_results]
    LOGGER.info("PubMed search: term=%r max_results=%s returned=%s", term, max_results, len(ids))
    return ids


def fetch_details(ids: list[str]) -> list[Article]:
    """Fetch and normalize records for one batch of PMIDs in a single request."""
    if not ids:
        return []

    params = {
        "db": "pubmed",
        "id": ",".join(ids),
        "retmode": "xml",
        **_ncbi_identity(),
    }

    try:
        response = requests.get(EFETCH_URL, params=params, timeout=REQUEST_TIMEOUT_SECONDS)
        response.raise_for_status()
    except requests.RequestException as exc:
        LOGGER.warning("PubMed fetch failed for %s ids, treating as empty: %s", len(ids), exc)
        return []

    try:
        articles, _failures = parse_records(response.content)
    except ElementTree.ParseError as exc:
        LOGGER.warning("PubMed fetch returned unparseable XML for %s ids: %s", len(ids), exc)
        return []

    LOGGER.info("PubMed fetch: requested=%s normalized=%s", len(ids), len(articles))
    return articles


def _parse_id_list(payload: Any) -> list[str]:
    result = payload.get("esearchresult") if isinstance(payload, dict) else None
    id_list = result.get("idlist") if isinstance(result, dict) else None
    if not isinstance(id_list, list):
        LOGGER.warning("Unexpected esearch payload shape; no idlist found")
        return []
    return [str(item).strip() for item in id_list if str(item).strip()]


def _ncbi_identity() -> dict[str, str]:
    """Optional NCBI etiquette parameters; an api_key raises the rate limit."""
    params: dict[str, str] = {}
    for env_name, param in (("NCBI_API_KEY", "api_key"), ("NCBI_TOOL", "tool"), ("NCBI_EMAIL", "email")):
        value = os.getenv(env_name, "").strip()
        if value:
            params[param] = value
    return params
