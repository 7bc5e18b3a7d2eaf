from unittest.mock import patch
from xml.etree import ElementTree

import pytest

from models import Article, NormalizationFailure
from normalizer import compose_date, normalize_record, parse_records

FULL_RECORD = """
<PubmedArticle>
  <MedlineCitation Status="MEDLINE">
    <PMID Version="1">38012345</PMID>
    <Article>
      <Journal>
        <JournalIssue>
          <PubDate><Year>2024</Year><Month>07</Month><Day>15</Day></PubDate>
        </JournalIssue>
      </Journal>
      <ArticleTitle>Base editing of <i>PCSK9</i> in primates.</ArticleTitle>
      <Abstract>
        <AbstractText Label="BACKGROUND">Cholesterol matters.</AbstractText>
        <AbstractText Label="RESULTS">Editing lowered LDL.</AbstractText>
      </Abstract>
      <AuthorList>
        <Author><LastName>Musunuru</LastName><ForeName>Kiran</ForeName></Author>
        <Author><LastName>Kathiresan</LastName><ForeName>Sekar</ForeName></Author>
      </AuthorList>
    </Article>
  </MedlineCitation>
</PubmedArticle>
"""


def _element(xml: str) -> ElementTree.Element:
    return ElementTree.fromstring(xml)


def _record(article_body: str, pmid: str = "1") -> ElementTree.Element:
    return _element(
        f"<PubmedArticle><MedlineCitation><PMID>{pmid}</PMID>"
        f"<Article>{article_body}</Article></MedlineCitation></PubmedArticle>"
    )


def test_normalize_full_record() -> None:
    article = normalize_record(_element(FULL_RECORD))

    assert article == Article(
        id="38012345",
        title="Base editing of PCSK9 in primates.",
        first_author="Musunuru Kiran",
        abstract="Cholesterol matters. Editing lowered LDL.",
        publication_date="2024-07-15",
    )


def test_only_first_author_is_kept() -> None:
    article = normalize_record(_element(FULL_RECORD))
    assert "Kathiresan" not in article.first_author


def test_last_name_only_author() -> None:
    record = _record("<AuthorList><Author><LastName>Doudna</LastName></Author></AuthorList>")
    assert normalize_record(record).first_author == "Doudna"


def test_collective_name_author() -> None:
    record = _record("<AuthorList><Author><CollectiveName>CRISPR Consortium</CollectiveName></Author></AuthorList>")
    assert normalize_record(record).first_author == "CRISPR Consortium"


def test_empty_author_list() -> None:
    record = _record("<AuthorList></AuthorList>")
    assert normalize_record(record).first_author == ""


@pytest.mark.parametrize("article_body", [
    "",
    "<ArticleTitle>Only a title</ArticleTitle>",
    "<Journal></Journal>",
    "<Journal><JournalIssue></JournalIssue></Journal>",
    "<Journal><JournalIssue><PubDate><Month>Jan</Month></PubDate></JournalIssue></Journal>",
    "<Abstract></Abstract>",
])
def test_missing_containers_yield_empty_strings(article_body: str) -> None:
    article = normalize_record(_record(article_body, pmid="99"))

    assert isinstance(article, Article)
    assert article.id == "99"
    for value in (article.first_author, article.abstract, article.publication_date):
        assert value == ""


def test_missing_article_container_still_normalizes() -> None:
    record = _element("<PubmedArticle><MedlineCitation><PMID>7</PMID></MedlineCitation></PubmedArticle>")
    assert normalize_record(record) == Article(id="7")


def test_missing_citation_is_failure() -> None:
    result = normalize_record(_element("<PubmedArticle><PubmedData/></PubmedArticle>"), index=3)

    assert isinstance(result, NormalizationFailure)
    assert result.index == 3
    assert "MedlineCitation" in result.reason


def test_blank_pmid_is_failure() -> None:
    record = _element("<PubmedArticle><MedlineCitation><PMID>  </PMID></MedlineCitation></PubmedArticle>")
    assert isinstance(normalize_record(record), NormalizationFailure)


@pytest.mark.parametrize(("year", "month", "day", "expected"), [
    ("2024", "07", "15", "2024-07-15"),
    ("2024", "07", "", "2024-07"),
    ("2024", "", "", "2024"),
    ("", "07", "15", ""),
    ("2024", "Jul", "", "2024-Jul"),
])
def test_compose_date(year: str, month: str, day: str, expected: str) -> None:
    assert compose_date(year, month, day) == expected


def test_publication_date_year_and_month() -> None:
    record = _record(
        "<Journal><JournalIssue><PubDate><Year>2024</Year><Month>07</Month></PubDate></JournalIssue></Journal>"
    )
    assert normalize_record(record).publication_date == "2024-07"


def test_parse_records_skips_bad_record_and_keeps_siblings() -> None:
    xml = (
        "<PubmedArticleSet>"
        "<PubmedArticle><MedlineCitation><PMID>1</PMID></MedlineCitation></PubmedArticle>"
        "<PubmedArticle><PubmedData/></PubmedArticle>"
        "<PubmedArticle><MedlineCitation><PMID>3</PMID></MedlineCitation></PubmedArticle>"
        "</PubmedArticleSet>"
    )

    articles, failures = parse_records(xml)

    assert [a.id for a in articles] == ["1", "3"]
    assert len(failures) == 1
    assert failures[0].index == 1


def test_parse_records_empty_set() -> None:
    articles, failures = parse_records("<PubmedArticleSet></PubmedArticleSet>")
    assert articles == []
    assert failures == []


def test_parse_records_raises_on_non_xml() -> None:
    with pytest.raises(ElementTree.ParseError):
        parse_records("not xml at all")


def test_unexpected_extraction_error_becomes_failure() -> None:
    with patch("normalizer.extract_abstract", side_effect=ValueError("boom")):
        result = normalize_record(_record("<ArticleTitle>T</ArticleTitle>"), index=4)

    assert isinstance(result, NormalizationFailure)
    assert result.index == 4
    assert result.reason == "ValueError: boom"


def test_parse_records_contains_unexpected_error_to_one_record() -> None:
    xml = (
        "<PubmedArticleSet>"
        "<PubmedArticle><MedlineCitation><PMID>1</PMID></MedlineCitation></PubmedArticle>"
        "<PubmedArticle><MedlineCitation><PMID>2</PMID></MedlineCitation></PubmedArticle>"
        "</PubmedArticleSet>"
    )

    with patch("normalizer.extract_abstract", side_effect=[ValueError("boom"), ""]):
        articles, failures = parse_records(xml)

    assert [a.id for a in articles] == ["2"]
    assert [f.index for f in failures] == [0]
    assert "ValueError" in failures[0].reason
