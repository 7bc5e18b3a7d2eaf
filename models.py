"""Shared typed models for the PubMed watch pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field, replace


@dataclass(frozen=True, slots=True)
class SearchTerm:
    """One stored search query and its per-run result cap."""

    term: str
    max_results: int


@dataclass(frozen=True, slots=True)
class Article:
    """Normalized PubMed record; every field except id may be empty."""

    id: str
    title: str = ""
    first_author: str = ""
    abstract: str = ""
    publication_date: str = ""
    summary: str = ""

    def with_summary(self, summary: str) -> Article:
        return replace(self, summary=summary)


@dataclass(frozen=True, slots=True)
class NormalizationFailure:
    """A raw record that was skipped during normalization."""

    index: int
    reason: str


@dataclass(frozen=True, slots=True)
class PersistedRecord:
    """One row of the append-only results log."""

    id: str
    title: str
    first_author: str
    publication_date: str
    search_term: str
    abstract: str
    summary: str
    recorded_at: str

    @classmethod
    def from_article(cls, article: Article, search_term: str, summary: str, recorded_at: str) -> PersistedRecord:
        return cls(
            id=article.id.strip(),
            title=article.title,
            first_author=article.first_author,
            publication_date=article.publication_date,
            search_term=search_term,
            abstract=article.abstract,
            summary=summary,
            recorded_at=recorded_at,
        )


@dataclass(frozen=True, slots=True)
class Settings:
    """Run configuration, loaded once and passed into the orchestrator."""

    email: str = ""
    summarization_api_key: str = ""
    summarization_provider: str = "openai"
    default_max_results: int = 10
    schedule_day: str = "Monday"
    schedule_hour: str = "9"
    results_path: str = "pubmed_results.csv"
    term_pause_seconds: float = 1.0


@dataclass(frozen=True, slots=True)
class TermOutcome:
    """A search term that was processed to completion."""

    term: str
    new_articles: list[Article] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class TermFailure:
    """A search term whose processing raised; the run moved on."""

    term: str
    error: str


@dataclass(frozen=True, slots=True)
class RunResult:
    """Summary of one orchestrator pass."""

    success: bool
    new_article_count: int
    message: str
