"""Email delivery of one search term's batch of new articles."""

from __future__ import annotations

import logging
import os
import smtplib
from datetime import UTC, datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape

from models import Article

PUBMED_ARTICLE_URL = "https://pubmed.ncbi.nlm.nih.gov/{pmid}/"
SMTP_TIMEOUT_SECONDS = 30

LOGGER = logging.getLogger(__name__)


def send_term_digest(articles: list[Article], search_term: str, recipient: str) -> None:
    """Send one email listing the new articles found for search_term.

    No-op on an empty batch. Raises RuntimeError when SMTP is not configured;
    the orchestrator treats that as a failure of this term only.
    """
    if not articles:
        return

    smtp_host = os.getenv("SMTP_HOST")
    if not smtp_configured():
        raise RuntimeError("SMTP_HOST environment variable is required to send email")
    smtp_port = int(os.getenv("SMTP_PORT", "587"))
    smtp_user = os.getenv("SMTP_USER")
    smtp_pass = os.getenv("SMTP_PASS")
    sender = os.getenv("SMTP_SENDER") or smtp_user or recipient

    msg = MIMEMultipart("alternative")
    msg["Subject"] = build_subject(articles, search_term)
    msg["From"] = sender
    msg["To"] = recipient
    msg.attach(MIMEText(format_digest_text(articles, search_term), "plain", "utf-8"))
    msg.attach(MIMEText(format_digest_html(articles, search_term), "html", "utf-8"))

    with smtplib.SMTP(smtp_host, smtp_port, timeout=SMTP_TIMEOUT_SECONDS) as server:
        if smtp_user and smtp_pass:
            server.starttls()
            server.login(smtp_user, smtp_pass)
        server.sendmail(sender, [recipient], msg.as_string())

    LOGGER.info("Sent digest for term=%r with %s articles to %s", search_term, len(articles), recipient)


def smtp_configured() -> bool:
    """True when an SMTP host is set, so a digest can actually be delivered."""
    return bool(os.getenv("SMTP_HOST", "").strip())


def build_subject(articles: list[Article], search_term: str) -> str:
    return f'New PubMed articles for "{search_term}" ({len(articles)})'


def format_digest_text(articles: list[Article], search_term: str) -> str:
    lines = [
        f'New PubMed articles for "{search_term}"',
        f"{len(articles)} new article(s) found on {datetime.now(UTC).strftime('%B %d, %Y')}",
        "=" * 60,
        "",
    ]
    for i, article in enumerate(articles, 1):
        lines.append(f"{i}. {article.title or '[Untitled]'}")
        lines.append(f"   First author: {article.first_author or 'Unknown'}")
        lines.append(f"   Published: {article.publication_date or 'Unknown'}")
        lines.append(f"   Link: {PUBMED_ARTICLE_URL.format(pmid=article.id)}")
        lines.append(f"   Summary: {article.summary}")
        lines.append("")
    return "\n".join(lines)


def format_digest_html(articles: list[Article], search_term: str) -> str:
    items: list[str] = []
    for article in articles:
        url = PUBMED_ARTICLE_URL.format(pmid=escape(article.id))
        items.append(
            "<li>"
            f'<a href="{url}">{escape(article.title or "[Untitled]")}</a><br>'
            f"<em>{escape(article.first_author or 'Unknown')}</em> | {escape(article.publication_date or 'Unknown')}"
            f"<p>{escape(article.summary)}</p>"
            "</li>"
        )
    return (
        "<html><body>"
        f"<h2>New PubMed articles for &quot;{escape(search_term)}&quot;</h2>"
        f"<ol>{''.join(items)}</ol>"
        "</body></html>"
    )
