"""CLI entrypoint and run orchestrator for the weekly PubMed watch."""

from __future__ import annotations

import argparse
import logging
import sys
import time

from dotenv import load_dotenv

from config import describe_schedule, load_search_terms, load_settings
from models import Article, RunResult, SearchTerm, Settings, TermFailure, TermOutcome
from notifier import send_term_digest, smtp_configured
from pubmed_client import fetch_details, search_ids
from record_store import id_already_recorded, record_if_new
from summarizer import summarize

MISSING_TERMS_MESSAGE = "No search terms configured. Add at least one search term before running."
MISSING_API_KEY_MESSAGE = "No summarization API key configured. Set it in the settings before running."
MISSING_EMAIL_MESSAGE = "No notification email configured. Set it in the settings before running."
MISSING_SMTP_MESSAGE = "No outgoing mail server configured. Set SMTP_HOST before running."


def parse_args() -> argparse.Namespace:
    """Parse command-line flags."""
    parser = argparse.ArgumentParser(description="Run the PubMed -> summary -> email watch")
    parser.add_argument("--settings", default=None, help="Path to the settings CSV (key,value)")
    parser.add_argument("--terms", default=None, help="Path to the search terms CSV (term,max_results)")
    parser.add_argument("--results", default=None, help="Path to the results CSV log")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Search and fetch only; no summaries, writes or emails",
    )
    parser.add_argument(
        "--show-schedule",
        action="store_true",
        help="Print the configured weekly schedule and exit",
    )
    return parser.parse_args()


def validate_config(settings: Settings, terms: list[SearchTerm]) -> str | None:
    """Return a user-facing failure message, or None when the run may proceed."""
    if not terms:
        return MISSING_TERMS_MESSAGE
    if not settings.summarization_api_key:
        return MISSING_API_KEY_MESSAGE
    if not settings.email:
        return MISSING_EMAIL_MESSAGE
    if not smtp_configured():
        return MISSING_SMTP_MESSAGE
    return None


def process_term(search_term: SearchTerm, settings: Settings, dry_run: bool = False) -> TermOutcome | TermFailure:
    """Search, fetch, summarize, record and notify for a single term.

    Any exception is turned into a TermFailure so the caller can move on.
    """
    term = search_term.term.strip()
    try:
        ids = search_ids(term, search_term.max_results)
        if not ids:
            logging.info("No recent PubMed ids for term=%r", term)
            return TermOutcome(term=term)

        articles = fetch_details(ids)
        logging.info("Fetched %s of %s records for term=%r", len(articles), len(ids), term)

        if dry_run:
            fresh = [a for a in articles if not id_already_recorded(a.id, csv_path=settings.results_path)]
            for article in fresh:
                logging.info("[dry-run] Would summarize and record id=%s: %s", article.id, article.title)
            return TermOutcome(term=term, new_articles=fresh)

        new_articles: list[Article] = []
        for article in articles:
            summary = summarize(
                article.abstract,
                api_key=settings.summarization_api_key,
                provider=settings.summarization_provider,
            )
            if record_if_new(article, term, summary, csv_path=settings.results_path):
                new_articles.append(article.with_summary(summary))

        if new_articles:
            send_term_digest(new_articles, term, settings.email)
        return TermOutcome(term=term, new_articles=new_articles)
    except Exception as exc:  # one term must never abort the run
        logging.exception("Failed processing term=%r: %s", term, exc)
        return TermFailure(term=term, error=str(exc))


def run(settings: Settings, terms: list[SearchTerm], dry_run: bool = False) -> RunResult:
    """Run one full pass over every configured search term."""
    problem = validate_config(settings, terms)
    if problem:
        logging.error("Run aborted: %s", problem)
        return RunResult(success=False, new_article_count=0, message=problem)

    outcomes: list[TermOutcome | TermFailure] = []
    for search_term in terms:
        if not search_term.term.strip():
            logging.info("Skipping blank search term")
            continue

        logging.info("Processing term=%r max_results=%s", search_term.term, search_term.max_results)
        outcomes.append(process_term(search_term, settings, dry_run=dry_run))
        # NCBI allows ~3 requests/s without an API key.
        time.sleep(settings.term_pause_seconds)

    total_new = sum(len(o.new_articles) for o in outcomes if isinstance(o, TermOutcome))
    failed = [o.term for o in outcomes if isinstance(o, TermFailure)]

    message = f"Run complete: {total_new} new article(s) across {len(outcomes)} term(s)."
    if dry_run:
        message = f"[dry-run] {message}"
    if failed:
        message += f" Failed terms: {', '.join(failed)}."

    logging.info("%s", message)
    return RunResult(success=True, new_article_count=total_new, message=message)


def main() -> None:
    """Initialize config and execute one run."""
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    args = parse_args()

    try:
        settings = load_settings(args.settings, results_path=args.results)
        if args.show_schedule:
            print(describe_schedule(settings))
            return
        terms = load_search_terms(args.terms, default_max_results=settings.default_max_results)
    except RuntimeError as exc:
        logging.error("Invalid configuration: %s", exc)
        print(f"Invalid configuration: {exc}")
        sys.exit(1)

    result = run(settings, terms, dry_run=args.dry_run)
    print(result.message)
    if not result.success:
        sys.exit(1)


if __name__ == "__main__":
    main()
