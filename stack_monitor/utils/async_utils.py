import asyncio
from dataclasses import dataclass
from typing import Awaitable, Generic, List, Optional, TypeVar

T = TypeVar("T")


@dataclass
class Settled(Generic[T]):
    """Outcome of an awaitable that was allowed to fail on its own."""
    value: Optional[T] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def settle(aw: Awaitable[T]) -> Settled[T]:
    """
    Await and capture the result or the exception instead of raising.
    Cancellation is not captured.
    """
    try:
        return Settled(value=await aw)
    except Exception as e:
        return Settled(error=e)


async def settle_all(*aws: Awaitable[T]) -> List[Settled[T]]:
    """
    Like asyncio.gather but every awaitable settles independently.
    Results keep the argument order, not completion order.
    """
    if not aws:
        return []
    return list(await asyncio.gather(*[settle(aw) for aw in aws]))
