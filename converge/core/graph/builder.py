"""
Construcción del grafo a partir de un catálogo de recursos.

Traduce las relaciones declaradas en cada recurso a aristas:
- before / notify: arista saliente.
- after (require) / subscribe: arista entrante.
- autorequires: arista entrante 'before', solo si el recurso requerido está declarado.
"""

from typing import Iterable

from converge.core.graph.graph import DependencyGraph, EdgeKind
from converge.core.resources.base import Resource


def build_graph(resources: Iterable[Resource], validate: bool = True) -> DependencyGraph:
    graph = DependencyGraph()
    resources = list(resources)
    for resource in resources:
        graph.add_resource(resource)

    for resource in resources:
        rid = resource.id
        for target in resource.before:
            graph.add_edge(rid, target, EdgeKind.BEFORE)
        for target in resource.notify:
            graph.add_edge(rid, target, EdgeKind.NOTIFY)
        for source in resource.after:
            graph.add_edge(source, rid, EdgeKind.BEFORE)
        for source in resource.subscribe:
            graph.add_edge(source, rid, EdgeKind.NOTIFY)

    for resource in resources:
        for required in resource.autorequires():
            # Una relación explícita en sentido contrario manda sobre la implícita
            if required in graph and not graph.has_edge(resource.id, required):
                graph.add_edge(required, resource.id, EdgeKind.BEFORE)

    if validate:
        # Fail-fast: un ciclo se detecta aquí, antes de cualquier apply
        graph.topological_order()
    return graph
