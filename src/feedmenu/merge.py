"""State-preserving merge of freshly parsed items into a feed's item list."""

from dataclasses import replace
from typing import Hashable, Iterable

from feedmenu.models import IdentityKey, Item, identity_key


def merge(
    existing: Iterable[Item],
    incoming: Iterable[Item],
    key: IdentityKey = identity_key,
) -> tuple[Item, ...]:
    """Merge ``incoming`` items into ``existing`` ones.

    Matching items keep their ``viewed``/``notified`` flags and take the
    incoming content when it changed or was updated more recently. New
    items start unflagged. Existing items missing from ``incoming`` are
    kept. The result is ordered newest first, undated items last, with
    ties in existing order and then incoming order.
    """
    # rank orders ties: existing positions first, then new items
    merged: dict[Hashable, tuple[Item, tuple[int, int]]] = {}
    for position, item in enumerate(existing):
        merged.setdefault(key(item), (item, (0, position)))

    seen: set[Hashable] = set()
    for position, item in enumerate(incoming):
        item_key = key(item)
        if item_key in seen:
            continue
        seen.add(item_key)

        if item_key in merged:
            current, rank = merged[item_key]
            merged[item_key] = (_refresh_content(current, item), rank)
        else:
            fresh = replace(item, viewed=False, notified=False)
            merged[item_key] = (fresh, (1, position))

    ordered = sorted(merged.values(), key=lambda pair: _sort_key(*pair))
    return tuple(item for item, _ in ordered)


def _refresh_content(current: Item, incoming: Item) -> Item:
    newer = incoming.updated is not None and (
        current.updated is None or incoming.updated > current.updated
    )
    if incoming.content == current.content and not newer:
        return current
    return replace(
        current,
        content=incoming.content,
        stripped_content=incoming.stripped_content,
        updated=incoming.updated,
    )


def _sort_key(item: Item, rank: tuple[int, int]):
    if item.published is None:
        return (1, 0.0, rank)
    return (0, -item.published.timestamp(), rank)
