# -*- coding: utf-8 -*-
"""Cache backend interface and key builders."""

import hashlib
import json
from typing import Any, Optional, Protocol, Sequence, runtime_checkable


@runtime_checkable
class CacheBackend(Protocol):
    """Key/value cache with per-entry time-to-live.

    ``get`` returns ``None`` for missing and expired keys, so ``None`` itself
    cannot be cached.
    """

    def get(self, key: str) -> Optional[Any]:
        ...

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        ...

    def ttl(self, key: str) -> Optional[float]:
        """Seconds until ``key`` expires, or ``None`` when absent."""
        ...

    def delete(self, key: str) -> bool:
        ...

    def clear(self) -> None:
        ...


def _norm(value: str) -> str:
    return str(value).lower().strip()


def factor_cache_key(country: str, category: str, item: str) -> str:
    """
    Cache key for a resolved emission factor.

    Format: ef:country:category:item
    Example: ef:global:meat:beef
    """
    return f"ef:{_norm(country)}:{_norm(category)}:{_norm(item)}"


def result_cache_key(
    dish_name: str,
    ingredients: Sequence[str],
    quantity: int,
    country: str,
    detail_level: str,
) -> str:
    """Cache key for a whole calculation result."""
    payload = json.dumps(
        {
            "dish": _norm(dish_name),
            "ingredients": [_norm(i) for i in ingredients],
            "quantity": quantity,
            "country": _norm(country),
            "detail": detail_level,
        },
        sort_keys=True,
    )
    digest = hashlib.sha256(payload.encode("utf-8")).hexdigest()[:32]
    return f"result:{digest}"
