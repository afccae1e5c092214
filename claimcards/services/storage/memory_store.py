from typing import Dict, List, Optional

from claimcards.core.schemas import ClaimCard, ItemId


class InMemoryClaimCardStore:
    """
    Per-instance keyed store: cards by id plus an item id -> card ids index.

    No module-level state; create one per run or test.
    """

    name = "memory"

    def __init__(self) -> None:
        self._cards: Dict[str, ClaimCard] = {}
        # dict keys keep insertion order, used as an ordered set
        self._item_index: Dict[ItemId, Dict[str, None]] = {}

    async def save_card(self, card: ClaimCard, item_id: Optional[ItemId] = None) -> None:
        self._cards[card.id] = card
        if item_id is not None:
            self._item_index.setdefault(item_id, {})[card.id] = None

    async def save_cards_for_item(self, cards: List[ClaimCard], item_id: ItemId) -> None:
        for card in cards:
            await self.save_card(card, item_id)

    async def get_card(self, card_id: str) -> Optional[ClaimCard]:
        return self._cards.get(card_id)

    async def get_cards_for_item(self, item_id: ItemId) -> List[ClaimCard]:
        ids = self._item_index.get(item_id, {})
        return [self._cards[cid] for cid in ids if cid in self._cards]

    async def delete_card(self, card_id: str) -> None:
        self._cards.pop(card_id, None)
        for ids in self._item_index.values():
            ids.pop(card_id, None)

    def __len__(self) -> int:
        return len(self._cards)
