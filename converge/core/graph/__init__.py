"""Grafo de dependencias entre recursos y su construcción desde un catálogo."""

from converge.core.graph.builder import build_graph
from converge.core.graph.graph import DependencyGraph, Edge, EdgeKind

__all__ = ["DependencyGraph", "Edge", "EdgeKind", "build_graph"]
