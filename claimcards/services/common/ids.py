import hashlib
import json
from typing import Optional

from claimcards.core.schemas import ClaimScope


def _serialize_scope(scope: Optional[ClaimScope]) -> str:
    if scope is None:
        return ""
    # compact JSON, declaration order, unset fields omitted
    return json.dumps(scope.model_dump(exclude_none=True), separators=(",", ":"), ensure_ascii=False)


def stable_claim_id(claim: str, scope: Optional[ClaimScope] = None, topic: Optional[str] = None) -> str:
    """
    Deterministic card id for (claim, scope, topic).

    Claim text is trimmed and lowercased before hashing, so re-extracting the
    same claim upserts the existing card. Scope and topic are hashed verbatim.
    """
    normalized = claim.strip().lower()
    payload = normalized + _serialize_scope(scope) + (topic or "")
    digest = hashlib.sha256(payload.encode("utf-8")).hexdigest()[:16]
    return f"claim_{digest}"
