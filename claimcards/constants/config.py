"""
Application configuration constants.
Centralized defaults for the claim-card pipeline, scoring constants, and provider endpoints.
"""

# ============================================================================
# PIPELINE DEFAULTS
# ============================================================================

# Generator identity written to every card's provenance
GENERATED_BY = "claimcards:generic@1"

# Maximum linked references resolved per run
PIPELINE_MAX_SOURCES_TO_RESOLVE = 120

# Simultaneous in-flight resolver calls
PIPELINE_RESOLUTION_CONCURRENCY = 6

# Maximum claims kept from the extractor
PIPELINE_MAX_CLAIMS = 12

# Resolved sources handed to the extractor (bounds LLM context size)
PIPELINE_MAX_SOURCES_FOR_SYNTHESIS = 60

# Evidence items per card
PIPELINE_EVIDENCE_TOP_K = 8

# Simultaneous in-flight judge calls
PIPELINE_JUDGE_CONCURRENCY = 6

# ============================================================================
# RELEVANCE SCORING
# ============================================================================

# Minimum token length counted by relevance scoring
RELEVANCE_MIN_TOKEN_LENGTH = 3

# Denominator floor: short claims can't reach 1.0 on a single shared token
RELEVANCE_MIN_DENOMINATOR = 8

# Denominator grows sub-linearly with claim length
RELEVANCE_DENOMINATOR_FACTOR = 0.75

# Added to sources whose title contains one of the claim's anchors
ANCHOR_BOOST = 0.12

# Abstract characters kept in an evidence excerpt
EVIDENCE_EXCERPT_MAX_CHARS = 260

HEURISTIC_RATIONALE = "Auto-mapped from title/abstract match (heuristic)"

# ============================================================================
# VERDICT AGGREGATION
# ============================================================================

VERDICT_SUPPORTED_RATIO = 0.72
VERDICT_CONTRADICTED_RATIO = 0.72
VERDICT_INSUFFICIENT_SIGNAL = 0.35

CONFIDENCE_WEIGHT_SCORE = 0.55
CONFIDENCE_WEIGHT_QUANTITY = 0.25
CONFIDENCE_WEIGHT_DECISIVENESS = 0.20

# Relevant evidence count after which quantity stops adding confidence
CONFIDENCE_QUANTITY_SATURATION = 6

# Never report full certainty
CONFIDENCE_CAP = 0.95

# Confidence floor when every evidence item was judged irrelevant
CONFIDENCE_IRRELEVANT_FLOOR = 0.1

# ============================================================================
# LLM SETTINGS
# ============================================================================

# Temperature for LLM calls (lower = more deterministic)
LLM_TEMPERATURE = 0.2

# Rate-limit (429) retries for Groq calls; waits double from the base up to the cap
GROQ_MAX_RETRIES = 5
GROQ_BASE_BACKOFF_SECONDS = 1.0
GROQ_MAX_BACKOFF_SECONDS = 60.0

# Extraction prompt packing
EXTRACTION_PROMPT_MAX_CHARS = 14000
EXTRACTION_PROMPT_MAX_ABSTRACT_CHARS = 420

# Upper bound on claims accepted from one LLM extraction payload
EXTRACTION_SCHEMA_MAX_CLAIMS = 30

# Anchors kept per extracted claim; extra anchors are dropped, not rejected
EXTRACTION_MAX_ANCHORS = 5

# ============================================================================
# SOURCE PROVIDERS
# ============================================================================

CROSSREF_WORKS_URL = "https://api.crossref.org/works"

SEMANTIC_SCHOLAR_PAPER_URL = "https://api.semanticscholar.org/graph/v1/paper"

SEMANTIC_SCHOLAR_FIELDS = "title,abstract,year,authors,externalIds,venue,url,fieldsOfStudy,citationCount"

# NCBI E-utilities (PubMed): search -> ids, summary -> metadata, fetch -> abstract XML
PUBMED_ESEARCH_URL = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils/esearch.fcgi"
PUBMED_ESUMMARY_URL = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils/esummary.fcgi"
PUBMED_EFETCH_URL = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils/efetch.fcgi"
PUBMED_ARTICLE_URL = "https://pubmed.ncbi.nlm.nih.gov/{pmid}/"

# Minimum normalized title overlap for a search hit to count as a resolution
RESOLVER_TITLE_MATCH_THRESHOLD = 0.6

# Candidates fetched per title search
RESOLVER_SEARCH_LIMIT = 5
