"""Normalization of PubMed efetch XML records into flat Article values."""

from __future__ import annotations

import logging
from xml.etree import ElementTree

from models import Article, NormalizationFailure

LOGGER = logging.getLogger(__name__)

Element = ElementTree.Element


def parse_records(xml_text: str | bytes) -> tuple[list[Article], list[NormalizationFailure]]:
    """Parse an efetch document and normalize each PubmedArticle independently.

    Raises ElementTree.ParseError if the document itself is not XML; a bad
    individual record only lands in the failure list.
    """
    root = ElementTree.fromstring(xml_text)
    records = [root] if root.tag == "PubmedArticle" else root.findall(".//PubmedArticle")

    articles: list[Article] = []
    failures: list[NormalizationFailure] = []
    for index, raw in enumerate(records):
        result = normalize_record(raw, index=index)
        if isinstance(result, NormalizationFailure):
            LOGGER.warning("Skipping PubMed record #%s: %s", index, result.reason)
            failures.append(result)
        else:
            articles.append(result)

    LOGGER.info(
        "Normalized PubMed records: total=%s ok=%s skipped=%s",
        len(records),
        len(articles),
        len(failures),
    )
    return articles, failures


def normalize_record(raw: Element, index: int = 0) -> Article | NormalizationFailure:
    """Convert one PubmedArticle element into an Article.

    Only a missing MedlineCitation/PMID makes the record unusable; every other
    absent container just leaves its field empty.
    """
    try:
        citation = _child(raw, "MedlineCitation")
        if citation is None:
            return NormalizationFailure(index=index, reason="missing MedlineCitation")

        pmid = _text(_child(citation, "PMID"))
        if not pmid:
            return NormalizationFailure(index=index, reason="missing PMID")

        article = _child(citation, "Article")
        return Article(
            id=pmid,
            title=_text(_child(article, "ArticleTitle")),
            first_author=extract_first_author(article),
            abstract=extract_abstract(article),
            publication_date=extract_publication_date(article),
        )
    except Exception as exc:  # one bad record must not sink the batch
        return NormalizationFailure(index=index, reason=f"{type(exc).__name__}: {exc}")


def extract_first_author(article: Element | None) -> str:
    author_list = _child(article, "AuthorList")
    authors = author_list.findall("Author") if author_list is not None else []
    if not authors:
        return ""

    first = authors[0]
    last_name = _text(_child(first, "LastName"))
    fore_name = _text(_child(first, "ForeName"))
    if last_name and fore_name:
        return f"{last_name} {fore_name}"
    if last_name:
        return last_name
    return _text(_child(first, "CollectiveName"))


def extract_abstract(article: Element | None) -> str:
    abstract = _child(article, "Abstract")
    if abstract is None:
        return ""
    segments = (_text(node) for node in abstract.findall("AbstractText"))
    return " ".join(segment for segment in segments if segment)


def extract_publication_date(article: Element | None) -> str:
    journal = _child(article, "Journal")
    issue = _child(journal, "JournalIssue")
    pub_date = _child(issue, "PubDate")
    return compose_date(
        _text(_child(pub_date, "Year")),
        _text(_child(pub_date, "Month")),
        _text(_child(pub_date, "Day")),
    )


def compose_date(year: str, month: str = "", day: str = "") -> str:
    """Join year, month and day with '-', dropping trailing absent parts."""
    if not year:
        return ""
    if not month:
        return year
    if not day:
        return f"{year}-{month}"
    return f"{year}-{month}-{day}"


def _child(parent: Element | None, tag: str) -> Element | None:
    if parent is None:
        return None
    return parent.find(tag)


def _text(node: Element | None) -> str:
    # itertext flattens inline markup such as <i> or <sup> inside titles.
    if node is None:
        return ""
    return " ".join("".join(node.itertext()).split())
