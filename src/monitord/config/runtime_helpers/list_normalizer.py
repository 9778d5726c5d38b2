"""List normalization utilities for configured tag lists."""

from __future__ import annotations

from typing import Sequence


class ListNormalizer:
    """Normalizes configured list values."""

    @staticmethod
    def deduplicate_preserving_order(items: Sequence[str]) -> tuple[str, ...]:
        """Remove duplicates while preserving first-seen order."""
        seen: set[str] = set()
        deduped: list[str] = []

        for item in items:
            if item not in seen:
                deduped.append(item)
                seen.add(item)

        return tuple(deduped)

