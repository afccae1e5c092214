import asyncio
import re
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import aiohttp

from claimcards.constants.config import (
    CROSSREF_WORKS_URL,
    PUBMED_ARTICLE_URL,
    PUBMED_EFETCH_URL,
    PUBMED_ESEARCH_URL,
    PUBMED_ESUMMARY_URL,
    RESOLVER_SEARCH_LIMIT,
    RESOLVER_TITLE_MATCH_THRESHOLD,
    SEMANTIC_SCHOLAR_FIELDS,
    SEMANTIC_SCHOLAR_PAPER_URL,
)
from claimcards.core.config import settings
from claimcards.core.logger import get_logger
from claimcards.core.schemas import LinkedSourceRef, SourceDetails
from claimcards.services.claim_cards.interfaces import ResolveOptions
from claimcards.services.common.dedup import dedupe_sources
from claimcards.services.common.text_cleaner import remove_html_tags, tokenize

logger = get_logger(__name__)

PROVIDER_CROSSREF = "crossref"
PROVIDER_SEMANTIC_SCHOLAR = "semantic_scholar"
PROVIDER_PUBMED = "pubmed"
ALL_PROVIDERS = (PROVIDER_SEMANTIC_SCHOLAR, PROVIDER_CROSSREF, PROVIDER_PUBMED)

_ABSTRACT_TEXT_RE = re.compile(r"<AbstractText[^>]*>(.*?)</AbstractText>", re.DOTALL)
_ELOCATION_DOI_RE = re.compile(r"doi:\s*(\S+)", re.IGNORECASE)
_YEAR_RE = re.compile(r"\b(\d{4})\b")


def title_overlap(a: str, b: str) -> float:
    """Share of distinct title words two titles have in common, relative to the longer title."""
    ta = set(tokenize(a, min_length=1))
    tb = set(tokenize(b, min_length=1))
    if not ta or not tb:
        return 0.0
    return len(ta & tb) / max(len(ta), len(tb))


def parse_crossref_item(item: Dict[str, Any]) -> Optional[SourceDetails]:
    titles = item.get("title") or []
    title = titles[0] if isinstance(titles, list) and titles else titles
    if not title or not isinstance(title, str):
        return None

    doi = item.get("DOI")
    date_parts = ((item.get("published") or item.get("issued") or {}).get("date-parts") or [[None]])[0]
    year = date_parts[0] if date_parts else None
    venues = item.get("container-title") or []

    authors = []
    for a in item.get("author") or []:
        name = f"{a.get('given', '')} {a.get('family', '')}".strip()
        if name:
            authors.append(name)

    return SourceDetails(
        id=f"doi:{doi}" if doi else None,
        title=title.strip(),
        authors=authors,
        year=year if isinstance(year, int) else None,
        url=item.get("URL") or (f"https://doi.org/{doi}" if doi else None),
        abstract=remove_html_tags(item.get("abstract") or "") or None,
        venue=venues[0] if isinstance(venues, list) and venues else None,
        doi=doi,
        citations_count=item.get("is-referenced-by-count"),
        provider=PROVIDER_CROSSREF,
    )


def parse_semantic_scholar_paper(paper: Dict[str, Any]) -> Optional[SourceDetails]:
    title = paper.get("title")
    if not title:
        return None

    doi = (paper.get("externalIds") or {}).get("DOI")
    return SourceDetails(
        id=paper.get("paperId"),
        title=title.strip(),
        authors=[a.get("name") for a in paper.get("authors") or [] if a.get("name")],
        year=paper.get("year"),
        url=paper.get("url") or (f"https://doi.org/{doi}" if doi else None),
        abstract=paper.get("abstract"),
        venue=paper.get("venue") or None,
        doi=doi,
        fields_of_study=list(paper.get("fieldsOfStudy") or []),
        citations_count=paper.get("citationCount"),
        provider=PROVIDER_SEMANTIC_SCHOLAR,
    )


def parse_pubmed_summary(pmid: str, doc: Dict[str, Any]) -> Optional[SourceDetails]:
    """One esummary `result[<pmid>]` record. The abstract comes from a separate efetch call."""
    title = (doc.get("title") or "").strip()
    if not title or doc.get("error"):
        return None

    doi = None
    for aid in doc.get("articleids") or []:
        if aid.get("idtype") == "doi" and aid.get("value"):
            doi = aid["value"]
            break
    if doi is None:
        match = _ELOCATION_DOI_RE.search(doc.get("elocationid") or "")
        doi = match.group(1) if match else None

    match = _YEAR_RE.search(doc.get("pubdate") or "")
    return SourceDetails(
        id=f"pmid:{pmid}",
        title=title,
        authors=[a.get("name") for a in doc.get("authors") or [] if a.get("name")],
        year=int(match.group(1)) if match else None,
        url=PUBMED_ARTICLE_URL.format(pmid=pmid),
        venue=doc.get("fulljournalname") or doc.get("source") or None,
        doi=doi,
        provider=PROVIDER_PUBMED,
    )


def parse_pubmed_abstract(xml: str) -> Optional[str]:
    """Join every <AbstractText> section of an efetch PubMed XML record."""
    sections = [remove_html_tags(s) for s in _ABSTRACT_TEXT_RE.findall(xml or "")]
    text = " ".join(s for s in sections if s)
    return text or None


class ScholarlyResolver:
    """
    Resolver over Semantic Scholar, Crossref and PubMed.

    Resolution order:
        1. DOI -> Crossref works lookup
        2. PMID -> PubMed summary + abstract
        3. Semantic Scholar id (or DOI / arXiv id) -> S2 paper lookup
        4. Title -> S2 search, best title match above threshold
        5. Title -> Crossref bibliographic query, best title match above threshold
        6. Title -> PubMed search, best title match above threshold, then its abstract

    `resolution_hints={"sources": [...]}` restricts the providers used.
    Network errors and non-200 responses resolve to None.
    """

    name = "scholarly-resolver@1"

    def __init__(
        self,
        timeout: Optional[float] = None,
        mailto: Optional[str] = None,
        semantic_scholar_api_key: Optional[str] = None,
        ncbi_api_key: Optional[str] = None,
    ) -> None:
        self.timeout = aiohttp.ClientTimeout(total=timeout or settings.RESOLVER_HTTP_TIMEOUT)
        self.mailto = mailto or settings.CROSSREF_MAILTO
        self.semantic_scholar_api_key = semantic_scholar_api_key or settings.SEMANTIC_SCHOLAR_API_KEY
        self.ncbi_api_key = ncbi_api_key or settings.NCBI_API_KEY

    # ---------------------------------------------------------------------
    # HTTP
    # ---------------------------------------------------------------------
    def _headers(self, url: str) -> Dict[str, str]:
        headers = {"User-Agent": f"claimcards/0.1 (mailto:{self.mailto})"}
        if self.semantic_scholar_api_key and url.startswith(SEMANTIC_SCHOLAR_PAPER_URL):
            headers["x-api-key"] = self.semantic_scholar_api_key
        return headers

    async def _fetch(self, url: str, params: Optional[Dict[str, Any]], as_json: bool) -> Any:
        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.get(url, params=params, headers=self._headers(url)) as resp:
                    if resp.status != 200:
                        logger.warning(f"[ScholarlyResolver] Non-200 status {resp.status} for {url}")
                        return None
                    if as_json:
                        return await resp.json(content_type=None)
                    return await resp.text()
        except Exception as e:
            logger.error(f"[ScholarlyResolver] HTTP fetch failed for {url}: {e}")
            return None

    async def _get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        data = await self._fetch(url, params, as_json=True)
        return data if isinstance(data, dict) else None

    async def _get_text(self, url: str, params: Optional[Dict[str, Any]] = None) -> Optional[str]:
        text = await self._fetch(url, params, as_json=False)
        return text if isinstance(text, str) else None

    # ---------------------------------------------------------------------
    # Crossref
    # ---------------------------------------------------------------------
    async def crossref_by_doi(self, doi: str) -> Optional[SourceDetails]:
        data = await self._get_json(f"{CROSSREF_WORKS_URL}/{quote(doi, safe='')}")
        if not data:
            return None
        return parse_crossref_item(data.get("message") or {})

    async def crossref_search(self, query: str, limit: int = RESOLVER_SEARCH_LIMIT) -> List[SourceDetails]:
        data = await self._get_json(CROSSREF_WORKS_URL, params={"query.bibliographic": query, "rows": str(limit)})
        items = ((data or {}).get("message") or {}).get("items") or []
        return [s for s in (parse_crossref_item(i) for i in items) if s is not None]

    # ---------------------------------------------------------------------
    # Semantic Scholar
    # ---------------------------------------------------------------------
    async def semantic_scholar_by_id(self, paper_id: str) -> Optional[SourceDetails]:
        data = await self._get_json(
            f"{SEMANTIC_SCHOLAR_PAPER_URL}/{quote(paper_id, safe=':/')}", params={"fields": SEMANTIC_SCHOLAR_FIELDS}
        )
        if not data:
            return None
        return parse_semantic_scholar_paper(data)

    async def semantic_scholar_search(self, query: str, limit: int = RESOLVER_SEARCH_LIMIT) -> List[SourceDetails]:
        data = await self._get_json(
            f"{SEMANTIC_SCHOLAR_PAPER_URL}/search",
            params={"query": query, "limit": str(limit), "fields": SEMANTIC_SCHOLAR_FIELDS},
        )
        papers = (data or {}).get("data") or []
        return [s for s in (parse_semantic_scholar_paper(p) for p in papers) if s is not None]

    # ---------------------------------------------------------------------
    # PubMed (NCBI E-utilities)
    # ---------------------------------------------------------------------
    def _ncbi_params(self, **params: str) -> Dict[str, str]:
        params.update({"db": "pubmed", "tool": "claimcards", "email": self.mailto})
        if self.ncbi_api_key:
            params["api_key"] = self.ncbi_api_key
        return params

    async def pubmed_summaries(self, pmids: List[str]) -> List[SourceDetails]:
        if not pmids:
            return []
        data = await self._get_json(PUBMED_ESUMMARY_URL, params=self._ncbi_params(id=",".join(pmids), retmode="json"))
        result = (data or {}).get("result") or {}
        summaries = []
        for pmid in pmids:
            parsed = parse_pubmed_summary(pmid, result.get(pmid) or {})
            if parsed is not None:
                summaries.append(parsed)
        return summaries

    async def pubmed_abstract(self, pmid: str) -> Optional[str]:
        xml = await self._get_text(PUBMED_EFETCH_URL, params=self._ncbi_params(id=pmid, retmode="xml"))
        return parse_pubmed_abstract(xml or "")

    async def _with_pubmed_abstract(self, details: SourceDetails) -> SourceDetails:
        pmid = (details.id or "").removeprefix("pmid:")
        abstract = await self.pubmed_abstract(pmid) if pmid else None
        return details.model_copy(update={"abstract": abstract}) if abstract else details

    async def pubmed_by_pmid(self, pmid: str) -> Optional[SourceDetails]:
        summaries = await self.pubmed_summaries([pmid.strip()])
        if not summaries:
            return None
        return await self._with_pubmed_abstract(summaries[0])

    async def pubmed_search(self, query: str, limit: int = RESOLVER_SEARCH_LIMIT) -> List[SourceDetails]:
        """Search hits without abstracts; fetch those per source with `pubmed_abstract`."""
        data = await self._get_json(
            PUBMED_ESEARCH_URL, params=self._ncbi_params(term=query, retmax=str(limit), retmode="json")
        )
        pmids = [str(i) for i in ((data or {}).get("esearchresult") or {}).get("idlist") or []]
        return await self.pubmed_summaries(pmids)

    # ---------------------------------------------------------------------
    # Resolution
    # ---------------------------------------------------------------------
    @staticmethod
    def _providers(opts: Optional[ResolveOptions]) -> List[str]:
        hinted = ((opts.resolution_hints or {}) if opts else {}).get("sources")
        if not hinted:
            return list(ALL_PROVIDERS)
        return [p for p in (str(h).lower() for h in hinted) if p in ALL_PROVIDERS]

    @staticmethod
    def _best_title_match(title: str, candidates: List[SourceDetails]) -> Optional[SourceDetails]:
        best: Optional[SourceDetails] = None
        best_score = 0.0
        for c in candidates:
            score = title_overlap(title, c.title)
            if score > best_score:
                best, best_score = c, score
        if best is not None and best_score >= RESOLVER_TITLE_MATCH_THRESHOLD:
            return best
        return None

    @staticmethod
    def _semantic_scholar_id(ref: LinkedSourceRef) -> Optional[str]:
        if ref.semantic_scholar_id:
            return ref.semantic_scholar_id
        if ref.doi:
            return f"DOI:{ref.doi}"
        if ref.arxiv_id:
            return f"ARXIV:{ref.arxiv_id}"
        if ref.pmid:
            return f"PMID:{ref.pmid}"
        return None

    @staticmethod
    def _fill_from_ref(details: SourceDetails, ref: LinkedSourceRef) -> SourceDetails:
        update: Dict[str, Any] = {}
        if details.year is None and ref.year is not None:
            update["year"] = ref.year
        if not details.authors and ref.authors:
            update["authors"] = list(ref.authors)
        if not details.url and ref.url:
            update["url"] = ref.url
        return details.model_copy(update=update) if update else details

    async def _lookup(self, ref: LinkedSourceRef, providers: List[str]) -> Optional[SourceDetails]:
        if ref.doi and PROVIDER_CROSSREF in providers:
            found = await self.crossref_by_doi(ref.doi)
            if found:
                return found

        if ref.pmid and PROVIDER_PUBMED in providers:
            found = await self.pubmed_by_pmid(ref.pmid)
            if found:
                return found

        if PROVIDER_SEMANTIC_SCHOLAR in providers:
            paper_id = self._semantic_scholar_id(ref)
            if paper_id:
                found = await self.semantic_scholar_by_id(paper_id)
                if found:
                    return found
            found = self._best_title_match(ref.title, await self.semantic_scholar_search(ref.title))
            if found:
                return found

        if PROVIDER_CROSSREF in providers:
            found = self._best_title_match(ref.title, await self.crossref_search(ref.title))
            if found:
                return found

        if PROVIDER_PUBMED in providers:
            found = self._best_title_match(ref.title, await self.pubmed_search(ref.title))
            if found:
                return await self._with_pubmed_abstract(found)

        return None

    async def resolve(self, ref: LinkedSourceRef, opts: Optional[ResolveOptions] = None) -> Optional[SourceDetails]:
        providers = self._providers(opts)
        if not providers:
            hints = opts.resolution_hints if opts else None
            logger.warning(f"[ScholarlyResolver] No supported providers in hints: {hints}")
            return None

        found = await self._lookup(ref, providers)
        if found is None:
            logger.debug(f"[ScholarlyResolver] Could not resolve '{ref.title}'")
            return None
        return self._fill_from_ref(found, ref)

    async def search(self, query: str, limit: int = 10) -> List[SourceDetails]:
        """
        Search Semantic Scholar, Crossref and PubMed in parallel and dedupe by DOI/title.

        PubMed hits carry no abstract here.
        """
        results = await asyncio.gather(
            self.semantic_scholar_search(query, limit=limit),
            self.crossref_search(query, limit=limit),
            self.pubmed_search(query, limit=limit),
        )
        merged = dedupe_sources([s for batch in results for s in batch])
        logger.info(f"[ScholarlyResolver] Search '{query}' returned {len(merged)} unique sources")
        return merged
