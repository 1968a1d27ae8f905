"""
Grafo de dependencias: aristas dirigidas "debe ocurrir antes" entre recursos.

Dos tipos de arista:
- before: A converge antes que B.
- notify: A converge antes que B y, si A cambia, B se refresca.

El orden topológico es determinista (empates por orden de declaración) y
un ciclo se reporta con CycleError antes de tocar el host.
"""

import heapq
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple, Union

from converge.core.errors import CycleError, ValidationError
from converge.core.resources.base import Resource, ref_id


class EdgeKind(str, Enum):
    BEFORE = "before"
    NOTIFY = "notify"


def _edge_kind(kind: Union[str, EdgeKind]) -> EdgeKind:
    try:
        return EdgeKind(kind)
    except ValueError as exc:
        valid = ", ".join(k.value for k in EdgeKind)
        raise ValidationError(f"Tipo de relación inválido {kind!r} (válidos: {valid})") from exc


class Edge:
    """Arista source -> target."""
    def __init__(self, source: str, target: str, kind: EdgeKind = EdgeKind.BEFORE):
        self.source = source
        self.target = target
        self.kind = _edge_kind(kind)

    def __repr__(self) -> str:
        arrow = "~>" if self.kind == EdgeKind.NOTIFY else "->"
        return f"{self.source} {arrow} {self.target}"


class DependencyGraph:
    """Recursos de una ejecución y sus relaciones de orden."""

    def __init__(self):
        self._resources: Dict[str, Resource] = {}
        self._index: Dict[str, int] = {}
        # source -> target -> Edge
        self._out: Dict[str, Dict[str, Edge]] = {}
        self._in: Dict[str, Dict[str, Edge]] = {}

    def add_resource(self, resource: Resource) -> Resource:
        rid = resource.id
        if rid in self._resources:
            raise ValidationError(f"Recurso declarado dos veces: {rid}")
        self._index[rid] = len(self._resources)
        self._resources[rid] = resource
        self._out[rid] = {}
        self._in[rid] = {}
        return resource

    def add_edge(
        self,
        a: Union[str, Resource],
        b: Union[str, Resource],
        kind: Union[str, EdgeKind] = EdgeKind.BEFORE,
    ) -> Edge:
        source, target = ref_id(a), ref_id(b)
        kind = _edge_kind(kind)
        for rid in (source, target):
            if rid not in self._resources:
                raise ValidationError(f"Relación con recurso no declarado: {rid}")
        if source == target:
            raise CycleError([source, target])

        existing = self._out[source].get(target)
        if existing is not None:
            # notify subsume a before
            if kind == EdgeKind.NOTIFY:
                existing.kind = EdgeKind.NOTIFY
            return existing

        edge = Edge(source, target, kind)
        self._out[source][target] = edge
        self._in[target][source] = edge
        return edge

    def get(self, rid: str) -> Optional[Resource]:
        return self._resources.get(rid)

    def __contains__(self, rid: object) -> bool:
        return rid in self._resources

    def __len__(self) -> int:
        return len(self._resources)

    @property
    def resources(self) -> List[Resource]:
        """Recursos en orden de declaración."""
        return list(self._resources.values())

    def edges(self) -> Iterator[Edge]:
        for rid in self._resources:
            yield from self._out[rid].values()

    def has_edge(self, a: str, b: str) -> bool:
        return b in self._out.get(a, {})

    def predecessors(self, rid: str) -> List[str]:
        return list(self._in[rid])

    def notify_targets(self, rid: str) -> List[str]:
        return [t for t, e in self._out[rid].items() if e.kind == EdgeKind.NOTIFY]

    def topological_order(self) -> List[Resource]:
        """
        Kahn con cola de prioridad por índice de declaración.
        Lanza CycleError si queda algún nodo sin ordenar.
        """
        indegree = {rid: len(self._in[rid]) for rid in self._resources}
        ready: List[Tuple[int, str]] = [
            (self._index[rid], rid) for rid, deg in indegree.items() if deg == 0
        ]
        heapq.heapify(ready)
        order: List[Resource] = []

        while ready:
            _, rid = heapq.heappop(ready)
            order.append(self._resources[rid])
            for target in self._out[rid]:
                indegree[target] -= 1
                if indegree[target] == 0:
                    heapq.heappush(ready, (self._index[target], target))

        if len(order) != len(self._resources):
            remaining = [rid for rid, deg in indegree.items() if deg > 0]
            raise CycleError(self.find_cycle(remaining) or remaining)
        return order

    def find_cycle(self, candidates: Optional[List[str]] = None) -> List[str]:
        """Devuelve un ciclo como lista de ids (primer id repetido al final) o []."""
        white, grey, black = 0, 1, 2
        color = {rid: white for rid in self._resources}

        # DFS iterativo: la profundidad del grafo no está acotada
        for start in candidates or list(self._resources):
            if color[start] != white:
                continue
            color[start] = grey
            path: List[str] = [start]
            pending: List[Iterator[str]] = [iter(self._out[start])]
            while pending:
                target = next(pending[-1], None)
                if target is None:
                    color[path.pop()] = black
                    pending.pop()
                    continue
                if color[target] == grey:
                    return path[path.index(target):] + [target]
                if color[target] == white:
                    color[target] = grey
                    path.append(target)
                    pending.append(iter(self._out[target]))
        return []
