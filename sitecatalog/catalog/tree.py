"""Tree ordering for flat category lists.

Categories are stored flat, each pointing at its parent. Listings show
them as a tree, which means a parent must come before its children and
siblings must stay together in display order. For example:

    Electronics
    Electronics > Phones
    Electronics > Phones > Smartphones
    Electronics > Laptops

The input is never trusted to be acyclic. Every descent tracks visited
IDs, and categories that can only be reached through a cycle are emitted
at the end in input order instead of being lost.
"""

from collections.abc import Iterable

import structlog

from sitecatalog.domain.entities import ROOT_CATEGORY_ID, Category

logger = structlog.get_logger()


def display_key(category: Category) -> tuple[int, int]:
    """Sort key for siblings: display order, ties broken by ID."""
    return (category.display_order, category.id)


def sort_categories_for_tree(
    categories: Iterable[Category],
    parent_id: int = ROOT_CATEGORY_ID,
    ignore_categories_without_existing_parent: bool = False,
) -> list[Category]:
    """Order categories so every node follows its ancestors.

    Args:
        categories: Flat category list. Not modified.
        parent_id: ID whose children form the top level.
        ignore_categories_without_existing_parent: Drop categories whose
            parent is missing from the input (together with their
            descendants) instead of appending them as extra roots.

    Returns:
        Categories in tree order.
    """
    by_id: dict[int, Category] = {}
    for category in categories:
        by_id.setdefault(category.id, category)

    children: dict[int, list[Category]] = {}
    for category in by_id.values():
        children.setdefault(category.parent_category_id, []).append(category)
    for siblings in children.values():
        siblings.sort(key=display_key)

    result: list[Category] = []
    visited: set[int] = set()

    def descend(start: Category) -> None:
        stack = [start]
        while stack:
            node = stack.pop()
            if node.id in visited:
                continue
            visited.add(node.id)
            result.append(node)
            stack.extend(reversed(children.get(node.id, [])))

    for root in children.get(parent_id, []):
        descend(root)

    if not ignore_categories_without_existing_parent:
        orphans = sorted(
            (
                c
                for c in by_id.values()
                if c.parent_category_id != parent_id and c.parent_category_id not in by_id
            ),
            key=display_key,
        )
        for orphan in orphans:
            descend(orphan)

    if len(visited) == len(by_id):
        return result

    # Whatever is left either hangs below a dropped orphan or sits on a cycle.
    cyclic = [
        c for c in by_id.values() if c.id not in visited and _reaches_cycle(c, by_id, parent_id)
    ]
    if cyclic:
        logger.warning(
            "Category hierarchy contains a cycle",
            category_ids=[c.id for c in cyclic],
        )
        for category in cyclic:
            visited.add(category.id)
            result.append(category)

    return result


def _reaches_cycle(category: Category, by_id: dict[int, Category], parent_id: int) -> bool:
    """Check whether walking up from a category loops back on itself."""
    seen: set[int] = set()
    current: Category | None = category
    while current is not None:
        if current.id in seen:
            return True
        seen.add(current.id)
        if current.parent_category_id == parent_id:
            return False
        current = by_id.get(current.parent_category_id)
    return False
