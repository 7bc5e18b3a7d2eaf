"""CSV-backed results log and the deduplication gate in front of it."""

from __future__ import annotations

import csv
import logging
import os
from dataclasses import asdict
from datetime import UTC, datetime
from pathlib import Path

from models import Article, PersistedRecord

RESULTS_CSV_PATH = os.getenv("RESULTS_CSV_PATH", "pubmed_results.csv")

LOGGER = logging.getLogger(__name__)

RESULT_COLUMNS = [
    "id",
    "title",
    "first_author",
    "publication_date",
    "search_term",
    "abstract",
    "summary",
    "recorded_at",
]


def id_already_recorded(article_id: str, csv_path: str | None = None) -> bool:
    """Return True if the trimmed id matches any id already in the results log.

    Scans the whole id column on every call; fine for a few hundred rows.
    """
    path = Path(csv_path or RESULTS_CSV_PATH)
    if not path.exists():
        return False

    wanted = article_id.strip()
    with path.open(newline="", encoding="utf-8") as fh:
        reader = csv.DictReader(fh)
        for row in reader:
            if (row.get("id") or "").strip() == wanted:
                return True
    return False


def record_if_new(
    article: Article,
    search_term: str,
    summary: str,
    csv_path: str | None = None,
) -> bool:
    """Append article to the results log unless its id is already there.

    Returns True when a row was written. The check-then-append is not safe
    against concurrent writers.
    """
    if id_already_recorded(article.id, csv_path=csv_path):
        LOGGER.info("Skipping already recorded id=%s", article.id.strip())
        return False

    record = PersistedRecord.from_article(
        article,
        search_term=search_term,
        summary=summary,
        recorded_at=datetime.now(UTC).isoformat(),
    )
    _append_row(record, csv_path=csv_path)
    return True


def _append_row(record: PersistedRecord, csv_path: str | None = None) -> None:
    path = Path(csv_path or RESULTS_CSV_PATH)
    write_header = not path.exists() or path.stat().st_size == 0

    with path.open("a", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(fh, fieldnames=RESULT_COLUMNS)
        if write_header:
            writer.writeheader()
        writer.writerow(asdict(record))

    LOGGER.info("Recorded id=%s for term=%r in %s", record.id, record.search_term, path)
