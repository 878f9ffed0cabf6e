"""Per-listing locks around check-then-write booking sequences"""
import asyncio
from collections import defaultdict
from typing import Dict
from uuid import UUID


class ListingLockRegistry:
    """Hands out one asyncio.Lock per listing.

    Holding the lock while checking overlap and writing the booking closes
    the window where two requests for the same dates both pass the check.
    Only serialises requests inside this process.
    """

    def __init__(self):
        self._locks: Dict[UUID, asyncio.Lock] = defaultdict(asyncio.Lock)

    def for_listing(self, listing_id: UUID) -> asyncio.Lock:
        return self._locks[listing_id]

    def discard(self, listing_id: UUID) -> None:
        lock = self._locks.get(listing_id)
        if lock is not None and not lock.locked():
            del self._locks[listing_id]
