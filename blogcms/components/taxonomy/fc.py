"""Taxonomy functional core - category tree assembly and cycle checks."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from blogcms.domain.entities import BlogCategory

from .models import CategoryNode


def tree_order(category: BlogCategory) -> tuple[int, str]:
    return (category.order, category.name.lower())


def build_tree(categories: Iterable[BlogCategory]) -> list[CategoryNode]:
    """
    Nest categories under their parents.

    Siblings are ordered by ``order`` then name. A category whose parent is
    not among ``categories`` (missing or inactive) is dropped together with
    its subtree.
    """
    ordered = sorted(categories, key=tree_order)
    nodes = {c.id: CategoryNode(c) for c in ordered}
    roots: list[CategoryNode] = []
    for category in ordered:
        node = nodes[category.id]
        if category.parent_id is None:
            roots.append(node)
        elif category.parent_id in nodes:
            nodes[category.parent_id].children.append(node)
    return roots


def creates_cycle(category_id: str, new_parent_id: str, parents: Mapping[str, str | None]) -> bool:
    """True when ``new_parent_id`` is the category itself or one of its descendants."""
    seen: set[str] = set()
    current: str | None = new_parent_id
    while current is not None and current not in seen:
        if current == category_id:
            return True
        seen.add(current)
        current = parents.get(current)
    return False
