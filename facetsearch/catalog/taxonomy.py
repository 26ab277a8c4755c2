"""Taxonomy tree.

The taxonomy is the human-facing category hierarchy products are
classified into. Nodes are configured by operators; this module
validates them into a tree and answers ancestry questions.

Taxonomy example:
    LUM                 Luminaires
    LUM_CEIL            Luminaires > Ceiling
    LUM_CEIL_REC        Luminaires > Ceiling > Recessed
    DRV                 Drivers
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

from facetsearch.domain.entities import TaxonomyNode
from facetsearch.domain.exceptions import DuplicateKeyError, InvalidTaxonomyError


@dataclass
class TaxonomyBranch:
    """A validated node with its resolved tree position.

    Attributes:
        node: The configured node.
        path: Codes from the root down to this node (inclusive).
        children: Child branches ordered by display order.
    """

    node: TaxonomyNode
    path: tuple[str, ...] = ()
    children: list["TaxonomyBranch"] = field(default_factory=list, repr=False)

    @property
    def code(self) -> str:
        """Taxonomy code of the node."""
        return self.node.code

    @property
    def depth(self) -> int:
        """Depth derived from the tree (0 = root)."""
        return len(self.path) - 1


class TaxonomyTree:
    """Validated taxonomy over the active nodes of a configuration.

    Example usage:
        tree = TaxonomyTree(nodes)
        tree.ancestors("LUM_CEIL_REC")      # ("LUM", "LUM_CEIL")
        tree.is_within("LUM_CEIL", "LUM")   # True
    """

    def __init__(self, nodes: Iterable[TaxonomyNode]) -> None:
        """Validate nodes and build the tree.

        Inactive nodes are excluded. A child of an inactive node is
        treated as referencing a non-existent parent.

        Args:
            nodes: Configured taxonomy nodes.

        Raises:
            DuplicateKeyError: If two nodes share a code.
            InvalidTaxonomyError: If a parent is missing or a cycle exists.
        """
        self._branches: dict[str, TaxonomyBranch] = {}
        self._roots: list[TaxonomyBranch] = []

        for node in nodes:
            if not node.active:
                continue
            if node.code in self._branches:
                raise DuplicateKeyError("taxonomy", node.code)
            self._branches[node.code] = TaxonomyBranch(node=node)

        for branch in self._branches.values():
            parent_code = branch.node.parent_code
            if parent_code is None:
                self._roots.append(branch)
                continue
            parent = self._branches.get(parent_code)
            if parent is None:
                raise InvalidTaxonomyError(
                    branch.code, f"parent '{parent_code}' does not exist or is inactive"
                )
            parent.children.append(branch)

        self._resolve_paths()

        def order(b: TaxonomyBranch) -> tuple[int, str]:
            return (b.node.display_order, b.code)

        self._roots.sort(key=order)
        for branch in self._branches.values():
            branch.children.sort(key=order)

    def _resolve_paths(self) -> None:
        """Assign root paths; any node not reached from a root is in a cycle."""
        stack = [(root, (root.code,)) for root in self._roots]
        while stack:
            branch, path = stack.pop()
            branch.path = path
            stack.extend((child, path + (child.code,)) for child in branch.children)

        for branch in self._branches.values():
            if not branch.path:
                raise InvalidTaxonomyError(branch.code, "node is part of a parent cycle")

    def __contains__(self, code: object) -> bool:
        return code in self._branches

    def __len__(self) -> int:
        return len(self._branches)

    def get(self, code: str) -> TaxonomyBranch | None:
        """Get branch by code.

        Args:
            code: Taxonomy code.

        Returns:
            Branch if found, None otherwise.
        """
        return self._branches.get(code)

    def get_roots(self) -> list[TaxonomyBranch]:
        """Get top-level branches.

        Returns:
            Root branches ordered by display order.
        """
        return list(self._roots)

    def get_leaves(self) -> list[TaxonomyBranch]:
        """Get branches with no children (leaf nodes).

        Returns:
            Leaf branches.
        """
        return [b for b in self._branches.values() if not b.children]

    def walk(self) -> list[TaxonomyBranch]:
        """All branches in depth-first display order."""
        ordered: list[TaxonomyBranch] = []
        stack = list(reversed(self._roots))
        while stack:
            branch = stack.pop()
            ordered.append(branch)
            stack.extend(reversed(branch.children))
        return ordered

    def ancestors(self, code: str) -> tuple[str, ...]:
        """Codes of all ancestors of a node, root first (excluding the node)."""
        branch = self._branches.get(code)
        if branch is None:
            return ()
        return branch.path[:-1]

    def descendants(self, code: str) -> set[str]:
        """Codes of the node's subtree (including the node)."""
        branch = self._branches.get(code)
        if branch is None:
            return set()
        result: set[str] = set()
        stack = [branch]
        while stack:
            current = stack.pop()
            result.add(current.code)
            stack.extend(current.children)
        return result

    def is_within(self, code: str, ancestor: str) -> bool:
        """Check whether ``code`` equals ``ancestor`` or lies in its subtree."""
        branch = self._branches.get(code)
        return branch is not None and ancestor in branch.path

    def overlaps(self, codes: Iterable[str], scope: Iterable[str]) -> bool:
        """Check whether the subtrees of ``codes`` and ``scope`` intersect.

        Two subtrees intersect exactly when one root is an ancestor-or-self
        of the other.
        """
        scope = list(scope)
        for code in codes:
            for other in scope:
                if self.is_within(code, other) or self.is_within(other, code):
                    return True
        return False

    def search(self, query: str) -> list[TaxonomyBranch]:
        """Search nodes by code or name (case-insensitive).

        Args:
            query: Search query.

        Returns:
            List of matching branches.
        """
        query_lower = query.lower()
        return [
            b for b in self.walk()
            if query_lower in b.node.name.lower() or query_lower in b.code.lower()
        ]
