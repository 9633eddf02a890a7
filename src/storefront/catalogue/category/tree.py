"""Tree shaping for category listings.

Categories arrive as a flat, display-ordered list and are nested in a single
pass keyed by id.
"""

from dataclasses import dataclass, field


@dataclass
class CategoryNode:
    category: object
    children: list["CategoryNode"] = field(default_factory=list)


def build_tree(categories) -> list[CategoryNode]:
    """Nest categories under their parents, preserving the input order.

    Categories whose parent is absent from the input (inactive or deleted)
    are treated as roots.
    """
    nodes = {str(category.id): CategoryNode(category) for category in categories}
    roots = []

    for category in categories:
        node = nodes[str(category.id)]
        parent = nodes.get(str(category.parent_id)) if category.parent_id else None
        if parent is None or parent is node:
            roots.append(node)
        else:
            parent.children.append(node)

    return roots


def full_path_name(category, ancestors, separator=" > ") -> str:
    """Human-readable breadcrumb, e.g. "Apparel > Shoes"."""
    return separator.join([ancestor.name for ancestor in ancestors] + [category.name])
