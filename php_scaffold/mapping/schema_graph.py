"""
Schema dependency graph.

Nodes are schema names; an edge A -> B means A's PHP class mentions B
(property type, array item, map value, oneOf member or allOf parent).
"""

from typing import List, Set

import networkx as nx

from ..gen_logging import get_logger

logger = get_logger(__name__)


def _property_refs(prop) -> Set[str]:
    refs: Set[str] = set()
    stack = [prop]
    while stack:
        current = stack.pop()
        if current is None:
            continue
        if current.ref:
            refs.add(current.ref)
        refs.update(current.one_of)
        stack.append(current.items)
        stack.append(current.additional)
    return refs


class SchemaGraph:
    """Directed graph of schema references for one ApiDocument."""

    def __init__(self, document):
        self.document = document
        self.graph = nx.DiGraph()
        self._build()

    def _build(self):
        for name, schema in self.document.schemas.items():
            self.graph.add_node(name, kind=schema.kind)

        for name, schema in self.document.schemas.items():
            targets: Set[str] = set(schema.parents)
            for prop in schema.properties:
                targets |= _property_refs(prop)
            if schema.alias_of is not None:
                targets |= _property_refs(schema.alias_of)
            for target in sorted(targets):
                if target in self.graph:
                    self.graph.add_edge(name, target)

    def dependencies(self, name: str) -> Set[str]:
        """Every schema `name` depends on, transitively (excluding itself unless cyclic)."""
        if name not in self.graph:
            return set()
        return set(nx.descendants(self.graph, name))

    def dependents(self, name: str) -> Set[str]:
        """Every schema that depends on `name`, transitively."""
        if name not in self.graph:
            return set()
        return set(nx.ancestors(self.graph, name))

    def cycles(self) -> List[List[str]]:
        return [sorted(cycle) for cycle in nx.simple_cycles(self.graph)]

    def operation_schemas(self) -> Set[str]:
        """Schemas reachable from any operation parameter, request body or response."""
        roots: Set[str] = set()
        for op in self.document.operations:
            for param in op.parameters:
                roots |= _property_refs(param.field)
            if op.request_body is not None:
                roots |= _property_refs(op.request_body.field)
            for response in op.responses:
                if response.field is not None:
                    roots |= _property_refs(response.field)

        reachable = {root for root in roots if root in self.graph}
        for root in list(reachable):
            reachable |= self.dependencies(root)
        return reachable

    def generation_order(self) -> List[str]:
        """
        Dependencies first, ties broken by name.

        Cycles are collapsed into strongly connected components so cyclic
        schemas still come out in a stable order.
        """
        condensed = nx.condensation(self.graph)
        members = condensed.graph["mapping"]
        component_names = {}
        for name, component in members.items():
            component_names.setdefault(component, []).append(name)

        # condensation edges point dependent -> dependency; emit dependencies first
        order: List[str] = []
        for component in nx.lexicographical_topological_sort(
            condensed.reverse(copy=True), key=lambda c: min(component_names[c])
        ):
            order.extend(sorted(component_names[component]))

        if len(order) != self.graph.number_of_nodes():
            logger.warning("  [WARN] Schema graph ordering dropped nodes; falling back to name order")
            return sorted(self.graph.nodes)
        return order
