"""
Diagram Model Component
This module holds the live set of nodes and edges shown on a diagram surface.
It owns identities, labels, positions, the one-level group ownership index and
the pending-removal flags. It performs no geometry.
"""

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Tuple, Union
from dataclasses import dataclass, field

from ..models import EdgeSpec, GraphSpec, NodeRole, NodeSpec, PositionSpec, SizeSpec
from ..utils.error_handling import MalformedGraphError, OperationResult
from ..utils.geometry_utils import Point2D, PointLike, as_point

logger = logging.getLogger(__name__)


@dataclass
class Node:
    """A diagram node. Position is the top-left corner, relative to the parent group if any."""
    id: str
    role: NodeRole
    position: Point2D
    label: str = ""
    parent_id: Optional[str] = None
    size: Optional[Tuple[float, float]] = None
    pending_removal: bool = False

    @classmethod
    def from_spec(cls, spec: Union['Node', NodeSpec, Dict[str, Any]]) -> 'Node':
        if isinstance(spec, Node):
            return spec
        if not isinstance(spec, NodeSpec):
            spec = NodeSpec.model_validate(spec)
        size = (spec.size.width, spec.size.height) if spec.size is not None else None
        return cls(
            id=spec.id,
            role=spec.role,
            position=Point2D(spec.position.x, spec.position.y),
            label=spec.label,
            parent_id=spec.parent_id,
            size=size,
        )

    def to_spec(self) -> NodeSpec:
        return NodeSpec(
            id=self.id,
            role=self.role,
            position=PositionSpec(x=self.position.x, y=self.position.y),
            label=self.label,
            parent_id=self.parent_id,
            size=SizeSpec(width=self.size[0], height=self.size[1]) if self.size else None,
        )


@dataclass
class Edge:
    """A directed connection between two nodes."""
    id: str
    source: str
    target: str
    label: Optional[str] = None
    pending_removal: bool = False

    @classmethod
    def from_spec(cls, spec: Union['Edge', EdgeSpec, Dict[str, Any]]) -> 'Edge':
        if isinstance(spec, Edge):
            return spec
        if not isinstance(spec, EdgeSpec):
            spec = EdgeSpec.model_validate(spec)
        return cls(id=spec.id, source=spec.source, target=spec.target, label=spec.label)

    def to_spec(self) -> EdgeSpec:
        return EdgeSpec(id=self.id, source=self.source, target=self.target, label=self.label)


@dataclass
class RemovalResult:
    """Ids removed by one commit."""
    node_ids: List[str] = field(default_factory=list)
    edge_ids: List[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.node_ids and not self.edge_ids

    def __bool__(self) -> bool:
        return not self.is_empty()


@dataclass
class PendingChange:
    """Ids whose pending-removal flag was just set, split by kind."""
    node_ids: Set[str] = field(default_factory=set)
    edge_ids: Set[str] = field(default_factory=set)

    def is_empty(self) -> bool:
        return not self.node_ids and not self.edge_ids

    def __bool__(self) -> bool:
        return not self.is_empty()


class DiagramModel:
    """
    Mutable node/edge store consumed by the renderer.
    All mutations happen on the UI event thread; readers always see a
    consistent state because removals are swapped in as a whole.
    """

    def __init__(self):
        self._nodes: Dict[str, Node] = {}
        self._edges: Dict[str, Edge] = {}
        # child id -> parent id, only for validated one-level group links
        self._parents: Dict[str, str] = {}

        self.callbacks: Dict[str, List[Callable]] = {
            'nodes_inserted': [],
            'edges_inserted': [],
            'pending_changed': [],
            'removal_committed': [],
            'node_updated': [],
            'edge_updated': [],
            'cleared': [],
        }

    # ------------------------------------------------------------------
    # Insertion
    # ------------------------------------------------------------------

    def insert_nodes(self, batch: Iterable[Union[Node, NodeSpec, Dict[str, Any]]]) -> OperationResult:
        """
        Append nodes in the given order.

        Args:
            batch: Nodes, NodeSpecs or node dictionaries

        Returns:
            OperationResult with the inserted ids, or the rejection error.
            A rejected batch leaves the model untouched.
        """
        try:
            nodes = [Node.from_spec(item) for item in batch]
        except ValueError as e:
            return OperationResult.rejected(MalformedGraphError(f"Invalid node descriptor: {e}"))

        seen: Set[str] = set()
        for node in nodes:
            if node.id in self._nodes or node.id in seen:
                return OperationResult.rejected(
                    MalformedGraphError(f"Duplicate node id: {node.id}", entity_id=node.id)
                )
            seen.add(node.id)

        links = self._resolve_parent_links(nodes)

        for node in nodes:
            node.pending_removal = False
            node.parent_id = links.get(node.id)
            self._nodes[node.id] = node
        self._parents.update(links)

        inserted = [node.id for node in nodes]
        logger.debug(f"Inserted {len(inserted)} node(s): {inserted}")
        self._trigger_callbacks('nodes_inserted', inserted)
        return OperationResult.ok(inserted)

    def _resolve_parent_links(self, nodes: List[Node]) -> Dict[str, str]:
        """
        Work out which nodes of a batch join a group, independent of batch order.

        A link survives only if its parent is a top-level group and its child
        owns no children, so containment never gets deeper than one level.
        """
        batch = {node.id: node for node in nodes}
        candidates: Dict[str, str] = {}
        for node in nodes:
            if node.parent_id is None:
                continue
            parent = self._nodes.get(node.parent_id) or batch.get(node.parent_id)
            if parent is None or parent.id == node.id:
                logger.warning(f"Node {node.id} names unknown parent {node.parent_id}; placed at top level")
            elif parent.role != NodeRole.GROUP:
                logger.warning(f"Node {node.id} names non-group parent {parent.id}; placed at top level")
            else:
                candidates[node.id] = parent.id

        existing_parents = set(self._parents.values())
        links: Dict[str, str] = {}
        for child_id, parent_id in candidates.items():
            if parent_id in self._parents or parent_id in candidates:
                logger.warning(f"Node {child_id} would nest below child group {parent_id}; placed at top level")
            elif child_id in existing_parents:
                logger.warning(f"Node {child_id} already owns children; placed at top level")
            else:
                links[child_id] = parent_id
        return links

    def insert_edges(self, batch: Iterable[Union[Edge, EdgeSpec, Dict[str, Any]]]) -> OperationResult:
        """
        Append edges in the given order.

        Args:
            batch: Edges, EdgeSpecs or edge dictionaries

        Returns:
            OperationResult with the inserted ids, or the rejection error when an
            edge names a node that is not in the model or reuses an id
        """
        try:
            edges = [Edge.from_spec(item) for item in batch]
        except ValueError as e:
            return OperationResult.rejected(MalformedGraphError(f"Invalid edge descriptor: {e}"))

        seen: Set[str] = set()
        for edge in edges:
            if edge.id in self._edges or edge.id in seen:
                return OperationResult.rejected(
                    MalformedGraphError(f"Duplicate edge id: {edge.id}", entity_id=edge.id)
                )
            seen.add(edge.id)

            missing = [node_id for node_id in (edge.source, edge.target) if node_id not in self._nodes]
            if missing:
                return OperationResult.rejected(
                    MalformedGraphError(
                        f"Edge {edge.id} references unknown node(s): {', '.join(missing)}",
                        entity_id=edge.id,
                        missing_ids=missing,
                    )
                )

        for edge in edges:
            edge.pending_removal = False
            self._edges[edge.id] = edge

        inserted = [edge.id for edge in edges]
        logger.debug(f"Inserted {len(inserted)} edge(s): {inserted}")
        self._trigger_callbacks('edges_inserted', inserted)
        return OperationResult.ok(inserted)

    # ------------------------------------------------------------------
    # Removal
    # ------------------------------------------------------------------

    def mark_pending_removal(self, node_ids: Iterable[str] = (),
                             edge_ids: Iterable[str] = ()) -> 'PendingChange':
        """
        Flag nodes and/or edges for removal at the next commit.

        Node and edge ids live in separate namespaces, so a node and an edge
        may share an id without one being marked for the other.

        Args:
            node_ids: Node ids; unknown ids are ignored
            edge_ids: Edge ids; unknown ids are ignored

        Returns:
            PendingChange with the ids whose flag changed
        """
        changed = PendingChange()
        for node_id in node_ids:
            node = self._nodes.get(node_id)
            if node is not None and not node.pending_removal:
                node.pending_removal = True
                changed.node_ids.add(node_id)
        for edge_id in edge_ids:
            edge = self._edges.get(edge_id)
            if edge is not None and not edge.pending_removal:
                edge.pending_removal = True
                changed.edge_ids.add(edge_id)

        if changed:
            self._trigger_callbacks('pending_changed', changed)
        return changed

    def commit_removals(self) -> RemovalResult:
        """
        Remove every flagged node and edge, plus every edge attached to a removed node.

        Returns:
            RemovalResult listing the removed ids in model order
        """
        removed_nodes = [node_id for node_id, node in self._nodes.items() if node.pending_removal]
        removed_node_set = set(removed_nodes)
        removed_edges = [
            edge_id for edge_id, edge in self._edges.items()
            if edge.pending_removal or edge.source in removed_node_set or edge.target in removed_node_set
        ]
        result = RemovalResult(node_ids=removed_nodes, edge_ids=removed_edges)
        if result.is_empty():
            return result

        removed_edge_set = set(removed_edges)
        nodes = {node_id: node for node_id, node in self._nodes.items() if node_id not in removed_node_set}
        edges = {edge_id: edge for edge_id, edge in self._edges.items() if edge_id not in removed_edge_set}
        parents = {}
        for child_id, parent_id in self._parents.items():
            if child_id in removed_node_set:
                continue
            if parent_id in removed_node_set:
                # Orphaned children keep their on-screen position
                child = nodes[child_id]
                parent_position = self.absolute_position(parent_id)
                child.position = child.position + parent_position
                child.parent_id = None
                continue
            parents[child_id] = parent_id

        self._nodes, self._edges, self._parents = nodes, edges, parents

        logger.info(f"Committed removal of {len(removed_nodes)} node(s) and {len(removed_edges)} edge(s)")
        self._trigger_callbacks('removal_committed', result)
        return result

    def clear(self):
        """Remove everything without a removal commit."""
        self._nodes = {}
        self._edges = {}
        self._parents = {}
        self._trigger_callbacks('cleared')

    # ------------------------------------------------------------------
    # Updates
    # ------------------------------------------------------------------

    def update_label(self, node_id: str, text: Optional[str]) -> bool:
        """Set the label of a node. Returns False for unknown ids."""
        node = self._nodes.get(node_id)
        if node is None:
            logger.debug(f"update_label ignored for unknown node {node_id}")
            return False
        node.label = text or ""
        self._trigger_callbacks('node_updated', node_id)
        return True

    def update_edge_label(self, edge_id: str, text: Optional[str]) -> bool:
        """Set or clear the label of an edge. Returns False for unknown ids."""
        edge = self._edges.get(edge_id)
        if edge is None:
            logger.debug(f"update_edge_label ignored for unknown edge {edge_id}")
            return False
        edge.label = text
        self._trigger_callbacks('edge_updated', edge_id)
        return True

    def update_position(self, node_id: str, point: PointLike) -> bool:
        """Move a node. The point is in the same frame as Node.position."""
        node = self._nodes.get(node_id)
        if node is None:
            logger.debug(f"update_position ignored for unknown id {node_id}")
            return False
        node.position = as_point(point)
        self._trigger_callbacks('node_updated', node_id)
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def nodes(self) -> List[Node]:
        return list(self._nodes.values())

    @property
    def edges(self) -> List[Edge]:
        return list(self._edges.values())

    def get_node(self, node_id: str) -> Optional[Node]:
        return self._nodes.get(node_id)

    def get_edge(self, edge_id: str) -> Optional[Edge]:
        return self._edges.get(edge_id)

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    def has_edge(self, edge_id: str) -> bool:
        return edge_id in self._edges

    def is_empty(self) -> bool:
        return not self._nodes and not self._edges

    def edges_for_node(self, node_id: str) -> List[Edge]:
        return [edge for edge in self._edges.values() if node_id in (edge.source, edge.target)]

    def parent_of(self, node_id: str) -> Optional[str]:
        return self._parents.get(node_id)

    def children_of(self, node_id: str) -> List[str]:
        return [child for child, parent in self._parents.items() if parent == node_id]

    def pending_node_ids(self) -> Set[str]:
        return {node_id for node_id, node in self._nodes.items() if node.pending_removal}

    def pending_edge_ids(self) -> Set[str]:
        return {edge_id for edge_id, edge in self._edges.items() if edge.pending_removal}

    def absolute_position(self, node_id: str) -> Point2D:
        """Top-left corner of a node in diagram space."""
        node = self._nodes[node_id]
        parent_id = self._parents.get(node_id)
        if parent_id is None or parent_id not in self._nodes:
            return Point2D(node.position.x, node.position.y)
        return node.position + self._nodes[parent_id].position

    def to_graph(self) -> GraphSpec:
        """Snapshot in the same shape as the input graph."""
        return GraphSpec(
            nodes=[node.to_spec() for node in self._nodes.values()],
            edges=[edge.to_spec() for edge in self._edges.values()],
        )

    def get_statistics(self) -> Dict[str, Any]:
        return {
            'node_count': len(self._nodes),
            'edge_count': len(self._edges),
            'group_links': len(self._parents),
            'pending_removal': len(self.pending_node_ids()) + len(self.pending_edge_ids()),
        }

    # ------------------------------------------------------------------
    # Callbacks
    # ------------------------------------------------------------------

    def add_callback(self, event_type: str, callback: Callable):
        """
        Add a callback for model events.

        Args:
            event_type: Type of event ('nodes_inserted', 'removal_committed', etc.)
            callback: Callback function to call
        """
        if event_type in self.callbacks:
            self.callbacks[event_type].append(callback)
        else:
            logger.warning(f"Unknown callback event type: {event_type}")

    def remove_callback(self, event_type: str, callback: Callable):
        """
        Remove a callback for model events.

        Args:
            event_type: Type of event
            callback: Callback function to remove
        """
        if event_type in self.callbacks and callback in self.callbacks[event_type]:
            self.callbacks[event_type].remove(callback)

    def _trigger_callbacks(self, event_type: str, *args, **kwargs):
        """Trigger all callbacks for a specific event type."""
        for callback in list(self.callbacks.get(event_type, [])):
            try:
                callback(*args, **kwargs)
            except Exception as e:
                logger.error(f"Error in {event_type} callback: {e}")
