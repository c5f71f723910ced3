"""Source adapters for the public APIs the aggregator calls."""

import asyncio
from typing import Any, Dict, List

import structlog
from bs4 import BeautifulSoup

from .interfaces import AggregatedItem, AuthorInfo, EngagementMetrics, ExternalSource
from ..config.settings import settings
from ..ingestion.http import HttpClient
from ..ingestion.parser import as_int, clean_text, parse_timestamp

logger = structlog.get_logger()

DESCRIPTION_LENGTH = 200


def _summary(text: str) -> str:
    if len(text) <= DESCRIPTION_LENGTH:
        return text
    return text[:DESCRIPTION_LENGTH].rstrip() + "..."


def _first(values: Any, default: str = "") -> str:
    """First element of an openFDA-style list field."""
    if isinstance(values, list) and values:
        return str(values[0])
    return default


def _node_text(node) -> str:
    return node.get_text(" ", strip=True) if node is not None else ""


class HackerNewsSource(ExternalSource):
    """Top stories from the Hacker News Firebase API."""

    name = "hacker-news"
    platform = "Hacker News"
    category = "technology"

    BASE_URL = "https://hacker-news.firebaseio.com/v0"

    def __init__(self, limit: int = None):
        self.limit = limit or settings.hacker_news_story_limit

    async def fetch_raw(self, http: HttpClient) -> List[Dict[str, Any]]:
        story_ids = await http.get_json(f"{self.BASE_URL}/topstories.json") or []
        stories = await asyncio.gather(
            *(http.get_json(f"{self.BASE_URL}/item/{story_id}.json") for story_id in story_ids[:self.limit]),
            return_exceptions=True,
        )

        records = []
        for story in stories:
            if isinstance(story, Exception):
                logger.debug("hacker_news_story_failed", error=str(story))
            elif isinstance(story, dict):
                records.append(story)
        return records

    def to_item(self, record: Dict[str, Any]) -> AggregatedItem:
        story_id = record["id"]
        text = clean_text(record.get("text"))
        author = record.get("by") or "anonymous"
        score = as_int(record.get("score"))

        return AggregatedItem(
            id=f"hn_{story_id}",
            title=clean_text(record.get("title")),
            description=_summary(text) or record.get("url", ""),
            body=text,
            url=record.get("url") or f"https://news.ycombinator.com/item?id={story_id}",
            platform=self.platform,
            category=self.category,
            author=AuthorInfo(id=author, username=author, reputation=score),
            timestamp=parse_timestamp(record.get("time")),
            engagement=EngagementMetrics(
                views=score,
                likes=score,
                comments=as_int(record.get("descendants")),
            ),
            tags=["technology", "community"],
        )


class GitHubSource(ExternalSource):
    """Repository search on the GitHub REST API."""

    name = "github"
    platform = "GitHub"
    category = "open source"

    SEARCH_URL = "https://api.github.com/search/repositories"

    def __init__(self, query: str = None, per_page: int = 20):
        self.query = query or settings.github_query
        self.per_page = per_page

    async def fetch_raw(self, http: HttpClient) -> List[Dict[str, Any]]:
        data = await http.get_json(self.SEARCH_URL, params={
            "q": self.query,
            "sort": "stars",
            "order": "desc",
            "per_page": self.per_page,
        })
        return list((data or {}).get("items") or [])

    def to_item(self, record: Dict[str, Any]) -> AggregatedItem:
        owner = record.get("owner") or {}
        description = clean_text(record.get("description"))
        stars = as_int(record.get("stargazers_count"))

        return AggregatedItem(
            id=f"gh_{record['id']}",
            title=clean_text(record.get("name")),
            description=description,
            body=description,
            url=record.get("html_url", ""),
            platform=self.platform,
            category=self.category,
            author=AuthorInfo(
                id=str(owner.get("id") or "anonymous"),
                username=owner.get("login") or "Anonymous",
                reputation=stars,
            ),
            timestamp=parse_timestamp(record.get("pushed_at") or record.get("created_at")),
            engagement=EngagementMetrics(
                views=as_int(record.get("watchers_count")),
                likes=stars,
                shares=as_int(record.get("forks_count")),
                comments=as_int(record.get("open_issues_count")),
            ),
            tags=["open-source"] + list(record.get("topics") or []),
            extra={
                "full_name": record.get("full_name"),
                "language": record.get("language"),
            },
        )


class PubMedSource(ExternalSource):
    """PubMed literature via NCBI E-utilities: esearch for ids, efetch for abstracts."""

    name = "pubmed"
    platform = "PubMed"
    category = "research"

    ESEARCH_URL = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils/esearch.fcgi"
    EFETCH_URL = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils/efetch.fcgi"

    def __init__(self, term: str = None, max_results: int = None):
        self.term = term or settings.pubmed_term
        self.max_results = max_results or settings.pubmed_max_results

    async def fetch_raw(self, http: HttpClient) -> List[Dict[str, Any]]:
        search = await http.get_json(self.ESEARCH_URL, params={
            "db": "pubmed",
            "term": self.term,
            "retmode": "json",
            "retmax": self.max_results,
            "sort": "relevance",
        })
        ids = ((search or {}).get("esearchresult") or {}).get("idlist") or []
        if not ids:
            return []

        xml = await http.get_text(self.EFETCH_URL, params={
            "db": "pubmed",
            "id": ",".join(ids),
            "retmode": "xml",
            "rettype": "abstract",
        })
        return self.parse_articles(xml)

    @staticmethod
    def parse_articles(xml: str) -> List[Dict[str, Any]]:
        """Extract pmid, title, abstract, authors, journal and date from efetch XML."""
        # html.parser lowercases tag names
        soup = BeautifulSoup(xml, "html.parser")
        articles = []
        for article in soup.find_all("pubmedarticle"):
            pmid = _node_text(article.find("pmid"))
            abstract = " ".join(
                part.get_text(" ", strip=True) for part in article.find_all("abstracttext")
            )
            authors = []
            for author in article.find_all("author"):
                last = _node_text(author.find("lastname"))
                if last:
                    initials = _node_text(author.find("initials"))
                    authors.append(f"{last} {initials}".strip())

            pub_date = article.find("pubdate")
            date_value = None
            if pub_date is not None:
                date_value = " ".join(
                    _node_text(pub_date.find(part)) for part in ("year", "month", "day")
                ).strip() or _node_text(pub_date.find("medlinedate"))

            journal = article.find("journal")
            articles.append({
                "pmid": pmid,
                "title": _node_text(article.find("articletitle")),
                "abstract": abstract,
                "authors": authors,
                "journal": _node_text(journal.find("title")) if journal is not None else "",
                "pub_date": date_value,
            })
        return articles

    def to_item(self, record: Dict[str, Any]) -> AggregatedItem:
        pmid = record["pmid"]
        abstract = clean_text(record.get("abstract"))
        authors = record.get("authors") or []

        return AggregatedItem(
            id=f"pm_{pmid}" if pmid else "",
            title=clean_text(record.get("title")),
            description=_summary(abstract),
            body=abstract,
            url=f"https://pubmed.ncbi.nlm.nih.gov/{pmid}/",
            platform=self.platform,
            category=self.category,
            author=AuthorInfo(
                id="pubmed",
                username=authors[0] if authors else "PubMed Authors",
                reputation=100,
            ),
            timestamp=parse_timestamp(record.get("pub_date")),
            tags=["research", "medical"],
            extra={"journal": record.get("journal") or None, "authors": authors},
        )


class ClinicalTrialsSource(ExternalSource):
    """Studies from the ClinicalTrials.gov v2 API."""

    name = "clinical-trials"
    platform = "ClinicalTrials.gov"
    category = "clinical trial"

    STUDIES_URL = "https://clinicaltrials.gov/api/v2/studies"

    def __init__(self, term: str = None, page_size: int = 20):
        self.term = term or settings.clinical_trials_term
        self.page_size = page_size

    async def fetch_raw(self, http: HttpClient) -> List[Dict[str, Any]]:
        data = await http.get_json(self.STUDIES_URL, params={
            "query.term": self.term,
            "pageSize": self.page_size,
            "format": "json",
        })
        return list((data or {}).get("studies") or [])

    def to_item(self, record: Dict[str, Any]) -> AggregatedItem:
        protocol = record["protocolSection"]
        identification = protocol.get("identificationModule") or {}
        status = protocol.get("statusModule") or {}
        conditions = (protocol.get("conditionsModule") or {}).get("conditions") or []
        phases = (protocol.get("designModule") or {}).get("phases") or []
        sponsor = ((protocol.get("sponsorCollaboratorsModule") or {}).get("leadSponsor") or {}).get("name")
        summary = clean_text((protocol.get("descriptionModule") or {}).get("briefSummary"))
        locations = (protocol.get("contactsLocationsModule") or {}).get("locations") or []

        nct_id = identification.get("nctId") or ""
        date_value = (
            (status.get("lastUpdatePostDateStruct") or {}).get("date")
            or (status.get("startDateStruct") or {}).get("date")
        )

        return AggregatedItem(
            id=f"ct_{nct_id}" if nct_id else "",
            title=clean_text(identification.get("briefTitle") or identification.get("officialTitle")),
            description=f"Clinical trial for {conditions[0] if conditions else 'Type 1 Diabetes'}",
            body=summary,
            url=f"https://clinicaltrials.gov/study/{nct_id}",
            platform=self.platform,
            category=self.category,
            author=AuthorInfo(
                id=sponsor or "clinicaltrials.gov",
                username=sponsor or "ClinicalTrials.gov",
                reputation=100,
            ),
            timestamp=parse_timestamp(date_value),
            tags=["clinical-trial", "research"] + [c.lower() for c in conditions],
            extra={
                "phase": ", ".join(phases) or "Unknown",
                "status": status.get("overallStatus") or "Unknown",
                "country": locations[0].get("country") if locations else None,
            },
        )


class RedditSource(ExternalSource):
    """Hot posts of one subreddit via its public JSON listing."""

    name = "reddit"
    platform = "Reddit"
    category = "community"

    def __init__(self, subreddit: str = None, limit: int = 25):
        self.subreddit = subreddit or settings.reddit_subreddit
        self.limit = limit

    async def fetch_raw(self, http: HttpClient) -> List[Dict[str, Any]]:
        data = await http.get_json(
            f"https://www.reddit.com/r/{self.subreddit}/hot.json",
            params={"limit": self.limit},
        )
        children = ((data or {}).get("data") or {}).get("children") or []
        return [child["data"] for child in children if isinstance(child, dict) and "data" in child]

    def to_item(self, record: Dict[str, Any]) -> AggregatedItem:
        selftext = clean_text(record.get("selftext"))
        author = record.get("author") or "anonymous"
        score = as_int(record.get("score"))
        flair = record.get("link_flair_text")

        return AggregatedItem(
            id=f"rd_{record['id']}",
            title=clean_text(record.get("title")),
            description=_summary(selftext),
            body=selftext,
            url=f"https://www.reddit.com{record['permalink']}" if record.get("permalink") else "",
            platform=self.platform,
            category=self.category,
            author=AuthorInfo(id=author, username=author, reputation=score),
            timestamp=parse_timestamp(record.get("created_utc")),
            engagement=EngagementMetrics(
                likes=as_int(record.get("ups")),
                comments=as_int(record.get("num_comments")),
            ),
            tags=["community"] + ([flair.lower()] if flair else []),
            extra={"subreddit": record.get("subreddit")},
        )


class FDADeviceEventSource(ExternalSource):
    """Medical device adverse event reports (openFDA MAUDE)."""

    name = "fda"
    platform = "FDA MAUDE"
    category = "safety report"

    EVENTS_URL = "https://api.fda.gov/device/event.json"

    def __init__(self, search: str = None, limit: int = 20):
        self.search = search or settings.fda_device_search
        self.limit = limit

    async def fetch_raw(self, http: HttpClient) -> List[Dict[str, Any]]:
        data = await http.get_json(self.EVENTS_URL, params={"search": self.search, "limit": self.limit})
        return list((data or {}).get("results") or [])

    def to_item(self, record: Dict[str, Any]) -> AggregatedItem:
        report_key = record.get("mdr_report_key") or record.get("report_number") or ""
        devices = record.get("device") or [{}]
        device = devices[0]
        device_name = device.get("brand_name") or device.get("generic_name") or ""
        event_type = record.get("event_type") or "Unknown"
        narrative = " ".join(
            clean_text(entry.get("text")) for entry in record.get("mdr_text") or [] if entry.get("text")
        )

        return AggregatedItem(
            id=f"fda_{report_key}" if report_key else "",
            title=clean_text(device_name),
            description=f"{event_type} report",
            body=narrative,
            url=(
                "https://www.accessdata.fda.gov/scripts/cdrh/cfdocs/cfMAUDE/detail.cfm"
                f"?mdrfoi__id={report_key}"
            ),
            platform=self.platform,
            category=self.category,
            author=AuthorInfo(id="fda", username="FDA Database", reputation=100),
            timestamp=parse_timestamp(record.get("date_received")),
            tags=["fda", "safety", "medical-device"],
            extra={
                "event_type": event_type,
                "device_name": device_name or None,
                "manufacturer": device.get("manufacturer_d_name"),
            },
        )


class OpenFDADrugLabelSource(ExternalSource):
    """Drug labels from openFDA."""

    name = "openfda"
    platform = "OpenFDA"
    category = "drug information"

    LABELS_URL = "https://api.fda.gov/drug/label.json"

    def __init__(self, search: str = None, limit: int = 20):
        self.search = search or settings.fda_drug_search
        self.limit = limit

    async def fetch_raw(self, http: HttpClient) -> List[Dict[str, Any]]:
        data = await http.get_json(self.LABELS_URL, params={"search": self.search, "limit": self.limit})
        return list((data or {}).get("results") or [])

    def to_item(self, record: Dict[str, Any]) -> AggregatedItem:
        openfda = record.get("openfda") or {}
        generic_name = _first(openfda.get("generic_name"))
        brand_name = _first(openfda.get("brand_name"))
        indications = clean_text(_first(record.get("indications_and_usage")))
        set_id = record.get("set_id") or ""

        return AggregatedItem(
            id=f"ofda_{record['id']}",
            title=clean_text(brand_name or generic_name),
            description=_summary(indications),
            body=indications,
            url=f"https://dailymed.nlm.nih.gov/dailymed/lookup.cfm?setid={set_id}" if set_id else "",
            platform=self.platform,
            category=self.category,
            author=AuthorInfo(
                id="openfda",
                username=_first(openfda.get("manufacturer_name"), "FDA Open Data"),
                reputation=100,
            ),
            timestamp=parse_timestamp(record.get("effective_time")),
            tags=["fda", "drug", "medication"],
            extra={"generic_name": generic_name or None, "brand_name": brand_name or None},
        )


def default_sources() -> List[ExternalSource]:
    return [
        HackerNewsSource(),
        GitHubSource(),
        PubMedSource(),
        ClinicalTrialsSource(),
        RedditSource(),
        FDADeviceEventSource(),
        OpenFDADrugLabelSource(),
    ]