"""Small helpers shared by the serialization pipeline."""

import inspect
from typing import Any, Iterable, List, Optional, Sequence


async def maybe_await(value: Any) -> Any:
    """Await ``value`` if it is awaitable, otherwise return it as-is.

    Role determiners, context designators and relation handlers may be
    plain functions or coroutine functions.
    """
    if inspect.isawaitable(value):
        return await value
    return value


def is_name_list(value: Any) -> bool:
    """Whether ``value`` is a list or tuple of strings."""
    return isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value)


def intersect(base: Sequence[str], narrowing: Optional[Iterable[str]]) -> List[str]:
    """Return the names of ``base`` that also appear in ``narrowing``.

    Keeps ``base`` order and drops duplicates. A ``narrowing`` of None
    leaves ``base`` unrestricted.
    """
    allowed = None if narrowing is None else set(narrowing)
    seen = set()
    result = []
    for name in base:
        if name in seen or (allowed is not None and name not in allowed):
            continue
        seen.add(name)
        result.append(name)
    return result
