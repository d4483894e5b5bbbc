"""Binary space partitioning trees over convex polygons.

A ``BSPNode`` holds a splitting plane, the polygons lying in that plane,
and optional front and back subtrees.  This is not a leafy BSP tree:
polygons live in every node.  A missing back child means the region
behind the plane is solid, a missing front child means it is empty.

Trees built from closed meshes of a few thousand faces are routinely
hundreds of levels deep (a convex solid degenerates into a chain), so
every traversal below uses an explicit stack instead of recursion.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Iterator, List, Optional, Sequence

from yapcsg.classify import partition_polygon
from yapcsg.numeric import BASE_EPSILON
from yapcsg.polygon import Plane, Polygon


class NodeState(Enum):
    EMPTY = 'empty'          # no plane yet
    LEAF = 'leaf'            # plane and coplanar bucket, no children
    INTERNAL = 'internal'    # plane with at least one child


class BSPNode:
    """One node of a solid's BSP tree.

    ``BSPNode(polygons, epsilon)`` builds a tree immediately.  Nodes own
    their children exclusively; use :meth:`clone` before handing a tree
    to anything that mutates it.
    """

    __slots__ = ('plane', 'polygons', 'front', 'back')

    def __init__(self, polygons: Optional[Iterable[Polygon]] = None,
                 epsilon: float = BASE_EPSILON):
        self.plane: Optional[Plane] = None
        self.polygons: List[Polygon] = []
        self.front: Optional[BSPNode] = None
        self.back: Optional[BSPNode] = None
        if polygons is not None:
            self.build(polygons, epsilon)

    def __repr__(self):
        return (f'BSPNode(state={self.state.value}, nodes={self.node_count()}, '
                f'polygons={self.polygon_count()})')

    @property
    def state(self) -> NodeState:
        if self.plane is None:
            return NodeState.EMPTY
        if self.front is None and self.back is None:
            return NodeState.LEAF
        return NodeState.INTERNAL

    def iter_nodes(self) -> Iterator['BSPNode']:
        """Pre-order walk: node, front subtree, back subtree."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            if node.back is not None:
                stack.append(node.back)
            if node.front is not None:
                stack.append(node.front)

    def clone(self) -> 'BSPNode':
        """Deep copy of the tree structure.

        Planes and polygons are immutable and are shared, only the nodes
        and polygon lists are copied.
        """
        root = BSPNode()
        stack = [(self, root)]
        while stack:
            src, dst = stack.pop()
            dst.plane = src.plane
            dst.polygons = list(src.polygons)
            if src.front is not None:
                dst.front = BSPNode()
                stack.append((src.front, dst.front))
            if src.back is not None:
                dst.back = BSPNode()
                stack.append((src.back, dst.back))
        return root

    def invert(self) -> None:
        """Convert solid space to empty space and empty space to solid.

        Flips every plane and polygon and swaps every node's children.
        Applying it twice restores the original tree.
        """
        for node in self.iter_nodes():
            node.polygons = [poly.flipped() for poly in node.polygons]
            if node.plane is not None:
                node.plane = node.plane.flipped()
            node.front, node.back = node.back, node.front

    def clip_polygons(self, polygons: Sequence[Polygon], epsilon: float) -> List[Polygon]:
        """Remove the parts of ``polygons`` that lie inside this solid.

        Coplanar polygons facing the same way as a node's plane are
        treated as in front of it, opposite-facing ones as behind it.
        Results of a front subtree precede those of the back subtree.
        """
        if self.plane is None:
            return list(polygons)

        result: List[Polygon] = []
        stack = [(self, list(polygons))]
        while stack:
            node, polys = stack.pop()
            if node.plane is None:
                result.extend(polys)
                continue
            front: List[Polygon] = []
            back: List[Polygon] = []
            for poly in polys:
                partition_polygon(node.plane, poly, epsilon, front, back, front, back)
            # no back child: everything behind is inside and is dropped
            if back and node.back is not None:
                stack.append((node.back, back))
            if front:
                if node.front is not None:
                    stack.append((node.front, front))
                else:
                    result.extend(front)
        return result

    def clip_to(self, other: 'BSPNode', epsilon: float) -> None:
        """Remove every polygon of this tree that lies inside ``other``."""
        for node in self.iter_nodes():
            node.polygons = other.clip_polygons(node.polygons, epsilon)

    def all_polygons(self) -> List[Polygon]:
        """Every polygon in the tree, in pre-order."""
        polygons: List[Polygon] = []
        for node in self.iter_nodes():
            polygons.extend(node.polygons)
        return polygons

    def build(self, polygons: Iterable[Polygon], epsilon: float) -> None:
        """Insert ``polygons`` into the tree.

        A node without a plane adopts the plane of the first polygon it
        receives.  Coplanar polygons of either orientation stay in the
        node; the rest are routed, split if necessary, to the children.
        """
        stack = [(self, list(polygons))]
        while stack:
            node, polys = stack.pop()
            if not polys:
                continue
            if node.plane is None:
                node.plane = polys[0].plane
            front: List[Polygon] = []
            back: List[Polygon] = []
            for poly in polys:
                partition_polygon(node.plane, poly, epsilon,
                                  node.polygons, node.polygons, front, back)
            if front:
                if node.front is None:
                    node.front = BSPNode()
                stack.append((node.front, front))
            if back:
                if node.back is None:
                    node.back = BSPNode()
                stack.append((node.back, back))

    def contains_point(self, point: Sequence[float], epsilon: float,
                       strict: bool = False) -> bool:
        """Is ``point`` inside the solid this tree bounds?

        Points within ``epsilon`` of the boundary count as inside unless
        ``strict`` is set.
        """
        if self.plane is None:
            return False
        stack = [self]
        while stack:
            node = stack.pop()
            if node.plane is None:
                continue
            d = node.plane.signed_distance(point)
            if strict:
                go_back = d < -epsilon
                go_front = not go_back
            else:
                go_back = d <= epsilon
                go_front = d >= -epsilon
            if go_back:
                if node.back is None:
                    return True
                stack.append(node.back)
            if go_front and node.front is not None:
                stack.append(node.front)
        return False

    def node_count(self) -> int:
        return sum(1 for _ in self.iter_nodes())

    def polygon_count(self) -> int:
        return sum(len(node.polygons) for node in self.iter_nodes())

    def depth(self) -> int:
        deepest = 0
        stack = [(self, 1)]
        while stack:
            node, level = stack.pop()
            deepest = max(deepest, level)
            if node.front is not None:
                stack.append((node.front, level + 1))
            if node.back is not None:
                stack.append((node.back, level + 1))
        return deepest


__all__ = ['NodeState', 'BSPNode']
