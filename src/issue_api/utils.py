from __future__ import annotations

from typing import Any, Dict, Iterable, List, Sequence, Union

SIMILAR_PREVIEW_SIZE = 3


# PUBLIC_INTERFACE
def listing_envelope(items: Union[Sequence[Any], Iterable[Any]], total: int) -> Dict[str, Any]:
    """
    Build the standard envelope for issue listings.

    Args:
        items: The issues matching the current filters.
        total: Number of issues before filtering.

    Returns:
        Dict with keys: items, shown, total.
    """
    materialized: List[Any] = list(items) if not isinstance(items, list) else items
    return {
        "items": materialized,
        "shown": len(materialized),
        "total": int(total),
    }


# PUBLIC_INTERFACE
def similar_envelope(items: Sequence[Any], checked: bool = True) -> Dict[str, Any]:
    """
    Build the duplicate-check result: all matches, a short preview, and how
    many matches the preview leaves out.
    """
    materialized = list(items)
    preview = materialized[:SIMILAR_PREVIEW_SIZE]
    return {
        "checked": checked,
        "count": len(materialized),
        "items": materialized,
        "preview": preview,
        "remaining": len(materialized) - len(preview),
    }
