"""
LLM Prompts for claim extraction and evidence judging.
Centralized prompt definitions used by the Groq-backed collaborators.
"""

# ============================================================================
# CLAIM EXTRACTION PROMPTS
# ============================================================================

CLAIM_EXTRACTION_PROMPT = """You are building auditable "claim cards" for a parent item (note/document/project).

Item title: "{title}"
Tags: {tags}
Item summary: {summary}

Task:
Extract up to {max_claims} atomic, testable, cross-source claims that summarize the *state of evidence* across the linked sources.
Rules:
- Each claim must be falsifiable and specific (include population/setting/timeframe/outcome when possible).
- Avoid universal claims ("always", "proves").
- Prefer claims that can be audited against titles/abstracts.
- If evidence appears mixed across sources, still extract the claim but keep it narrow and testable.
- Add 0-5 anchors (source titles/substrings) most directly related.

Linked sources (titles + abstract snippets):
{sources}

Return ONLY valid JSON with this structure:
{{
  "claims": [
    {{
      "claim": "...",
      "topic": "...",
      "scope": {{
        "population": "...",
        "intervention": "...",
        "comparator": "...",
        "outcome": "...",
        "timeframe": "...",
        "setting": "..."
      }},
      "anchors": ["..."]
    }}
  ]
}}"""

# ============================================================================
# EVIDENCE JUDGE PROMPTS
# ============================================================================

EVIDENCE_JUDGE_PROMPT = """Evaluate whether this research source supports, contradicts, or is irrelevant to the claim.

Claim: "{claim}"

Source:
Title: {title}
Authors: {authors}
Year: {year}
Abstract: {abstract}

Instructions:
- Respond with polarity: supports/contradicts/mixed/irrelevant
- Provide a brief rationale (1-2 sentences)
- Give a confidence score (0-1) for your judgment

Focus on whether the abstract directly addresses the claim, not just topical relevance.

Return ONLY this JSON format:
{{
  "polarity": "supports",
  "rationale": "...",
  "score": 0.8
}}"""
