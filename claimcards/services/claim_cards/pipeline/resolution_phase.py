"""
Resolution Phase: turn linked source refs into SourceDetails.
"""

from typing import Any, Dict, List, Optional, Sequence

from claimcards.constants.config import PIPELINE_MAX_SOURCES_TO_RESOLVE, PIPELINE_RESOLUTION_CONCURRENCY
from claimcards.core.logger import get_logger
from claimcards.core.schemas import LinkedSourceRef, SourceDetails
from claimcards.services.claim_cards.interfaces import ResolveOptions, Resolver
from claimcards.services.common.concurrency import map_with_concurrency

logger = get_logger(__name__)


async def resolve_linked_sources_to_details(
    linked: Sequence[LinkedSourceRef],
    resolver: Resolver,
    max_sources_to_resolve: int = PIPELINE_MAX_SOURCES_TO_RESOLVE,
    concurrency: int = PIPELINE_RESOLUTION_CONCURRENCY,
    resolution_hints: Optional[Dict[str, Any]] = None,
) -> List[SourceDetails]:
    """
    Resolve up to `max_sources_to_resolve` refs with bounded concurrency.

    A ref whose resolver call raises or returns None is dropped; one bad
    reference never aborts the run.

    Args:
        linked: Linked refs in caller order
        resolver: Resolver collaborator
        max_sources_to_resolve: Refs beyond this index are ignored
        concurrency: Maximum in-flight resolver calls (min 1)
        resolution_hints: Passed through to the resolver

    Returns:
        Resolved sources in the same relative order as `linked`
    """
    concurrency = max(1, int(concurrency))
    batch = list(linked[: max(0, int(max_sources_to_resolve))])
    opts = ResolveOptions(
        max_sources_to_resolve=max_sources_to_resolve,
        concurrency=concurrency,
        resolution_hints=resolution_hints,
    )

    async def _resolve_one(ref: LinkedSourceRef, idx: int) -> Optional[SourceDetails]:
        try:
            return await resolver.resolve(ref, opts)
        except Exception as e:
            logger.warning(f"[ResolutionPhase] Resolver '{resolver.name}' failed for ref #{idx} '{ref.title}': {e}")
            return None

    resolved = await map_with_concurrency(batch, concurrency, _resolve_one)
    sources = [s for s in resolved if s is not None]

    logger.info(
        f"[ResolutionPhase] Resolved {len(sources)}/{len(batch)} refs "
        f"(linked={len(linked)}, resolver={resolver.name}, concurrency={concurrency})"
    )
    return sources
