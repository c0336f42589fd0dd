"""Collection aggregation: serialize members concurrently, drop ABSENT ones."""

import asyncio
from typing import Any, Awaitable, Callable, List, Sequence

from airlock.core.protocols.record import RecordProtocol
from airlock.domains.serialization.types import ABSENT

MemberSerializer = Callable[[RecordProtocol], Awaitable[Any]]


class CollectionAggregator:
    """Fans a member serializer out over a collection.

    Removed members leave no trace: no placeholder, no gap in the order, and
    the length of the result only counts visible members.
    """

    async def aggregate(
        self, records: Sequence[RecordProtocol], serialize_member: MemberSerializer
    ) -> List[Any]:
        """Serialize all members and return the visible results in membership order.

        Args:
            records: The collection's members, in order.
            serialize_member: Coroutine function serializing one member.

        Returns:
            Serialized members, ABSENT ones removed.
        """
        results = await asyncio.gather(*[serialize_member(record) for record in records])
        return [result for result in results if result is not ABSENT]
