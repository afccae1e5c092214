from typing import Dict, Iterable, Optional

from claimcards.core.schemas import LinkedSourceRef, SourceDetails
from claimcards.services.claim_cards.interfaces import ResolveOptions
from claimcards.services.common.dedup import source_key
from claimcards.services.common.text_cleaner import normalize_text


class StaticResolver:
    """
    Resolver over an in-memory catalogue of SourceDetails.

    Matches by DOI first, then by case-insensitive title. Useful offline and in tests.
    """

    def __init__(self, sources: Iterable[SourceDetails], name: str = "static-resolver") -> None:
        self.name = name
        self._by_doi: Dict[str, SourceDetails] = {}
        self._by_title: Dict[str, SourceDetails] = {}
        for s in sources:
            if s.doi:
                self._by_doi.setdefault(source_key(s), s)
            self._by_title.setdefault(normalize_text(s.title).lower(), s)

    async def resolve(self, ref: LinkedSourceRef, opts: Optional[ResolveOptions] = None) -> Optional[SourceDetails]:
        if ref.doi:
            hit = self._by_doi.get(f"doi:{ref.doi.strip().lower()}")
            if hit is not None:
                return hit
        return self._by_title.get(normalize_text(ref.title).lower())
