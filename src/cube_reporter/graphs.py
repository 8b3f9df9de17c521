"""Composition and network topology graphs, layered layout and PNG rendering."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional, Union

import networkx as nx

from cube_reporter.composition import CubeContainer, DockerCompositions
from cube_reporter.docker.base import ContainerExecutor, network_mode_from_inspect
from cube_reporter.errors import ReportError

logger = logging.getLogger(__name__)

CONTAINER_FILL = "#C3D9FF"
NETWORK_FILL = "#00FF00"
EDGE_COLOR = "#6482B9"
CONTAINER_SIZE = (80, 30)
NETWORK_SIZE = (60, 20)
# Approximate glyph width at the rendering font size, in layout units.
_CHAR_WIDTH = 7
_CELL_PADDING = 16


def _cell_width(label: str, minimum: int) -> int:
    return max(minimum, len(label) * _CHAR_WIDTH + _CELL_PADDING)


def _add_container_vertex(graph: nx.DiGraph, container_id: str) -> None:
    if container_id in graph:
        return
    width, height = CONTAINER_SIZE
    graph.add_node(
        container_id,
        kind="container",
        label=container_id,
        fill=CONTAINER_FILL,
        width=_cell_width(container_id, width),
        height=height,
    )


def _add_network_vertex(graph: nx.DiGraph, network: str) -> str:
    node = f"network:{network}"
    if node in graph:
        return node
    width, height = NETWORK_SIZE
    graph.add_node(
        node,
        kind="network",
        label=network,
        fill=NETWORK_FILL,
        width=_cell_width(network, width),
        height=height,
    )
    return node


def _add_direct_links(graph: nx.DiGraph, container_id: str, container: CubeContainer) -> None:
    for link in container.links:
        _add_container_vertex(graph, link.name)
        graph.add_edge(container_id, link.name, label=link.alias)


def build_composition_graph(compositions: DockerCompositions) -> nx.DiGraph:
    """Containers as vertices, direct links as edges labelled with the alias.

    Transitive links are not drawn: a container referenced only as a link
    target gets its own edges once its definition is visited.
    """
    graph = nx.DiGraph(name="docker_composition")
    for container_id, container in compositions.items():
        _add_container_vertex(graph, container_id)
        _add_direct_links(graph, container_id, container)
    return graph


def container_networks(
    container_id: str,
    container: CubeContainer,
    executor: Optional[ContainerExecutor],
) -> list[str]:
    networks: list[str] = []
    if container.network_mode:
        networks.append(container.network_mode)
    elif executor is not None:
        inspect = executor.inspect_container(container_id)
        default_network = network_mode_from_inspect(inspect)
        if default_network:
            networks.append(default_network)
    for network in container.networks:
        if network not in networks:
            networks.append(network)
    return networks


def build_network_topology_graph(
    compositions: DockerCompositions,
    executor: Optional[ContainerExecutor],
) -> nx.DiGraph:
    """Containers linked to every network they join; manual containers stand alone."""
    graph = nx.DiGraph(name="docker_network_topology")
    for container_id, container in compositions.items():
        _add_container_vertex(graph, container_id)
        if container.manual:
            continue
        for network in container_networks(container_id, container, executor):
            node = _add_network_vertex(graph, network)
            graph.add_edge(container_id, node, label=network)
    return graph


def hierarchical_layout(graph: nx.DiGraph) -> dict[Any, tuple[float, float]]:
    """Layered positions flowing left to right along edge direction.

    Strongly connected components share a layer so cyclic links still lay out.
    """
    if graph.number_of_nodes() == 0:
        return {}
    condensed = nx.condensation(graph)
    layered = nx.DiGraph()
    for layer, generation in enumerate(nx.topological_generations(condensed)):
        for component in sorted(generation):
            for node in sorted(condensed.nodes[component]["members"], key=str):
                layered.add_node(node, layer=layer)
    positions = nx.multipartite_layout(layered, subset_key="layer", align="vertical")
    return {node: (float(x), float(y)) for node, (x, y) in positions.items()}


def _matplotlib_context() -> Any:
    try:
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
    except ImportError as exc:
        raise ReportError("matplotlib is required to render graph images.") from exc
    return plt


def render_graph_png(
    graph: nx.DiGraph,
    path: Union[str, Path],
    *,
    dpi: int = 110,
) -> Path:
    """Rasterize ``graph`` to a PNG file with a white background."""
    if graph.number_of_nodes() == 0:
        raise ReportError(f"Graph {graph.graph.get('name', '')!r} has no vertices to render.")
    plt = _matplotlib_context()
    path = Path(path)
    positions = hierarchical_layout(graph)
    layers = len({x for x, _ in positions.values()})
    rows = max(
        sum(1 for other_x, _ in positions.values() if other_x == x) for x, _ in positions.values()
    )
    figsize = (max(4.0, 2.6 * layers), max(2.5, 0.9 * rows + 1.0))
    fig, ax = plt.subplots(figsize=figsize)
    try:
        ax.set_axis_off()
        fig.patch.set_facecolor("white")
        nx.draw_networkx_edges(
            graph,
            positions,
            ax=ax,
            edge_color=EDGE_COLOR,
            arrows=True,
            arrowsize=12,
            node_size=1800,
            node_shape="s",
        )
        edge_labels = {
            (source, target): data.get("label", "")
            for source, target, data in graph.edges(data=True)
            if data.get("label")
        }
        if edge_labels:
            nx.draw_networkx_edge_labels(
                graph, positions, edge_labels=edge_labels, ax=ax, font_size=7
            )
        for node, data in graph.nodes(data=True):
            x, y = positions[node]
            ax.text(
                x,
                y,
                data.get("label", str(node)),
                ha="center",
                va="center",
                fontsize=8,
                bbox={
                    "boxstyle": "round,pad=0.4",
                    "facecolor": data.get("fill", CONTAINER_FILL),
                    "edgecolor": EDGE_COLOR,
                },
            )
        ax.margins(0.2)
        path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(path, format="png", dpi=dpi, facecolor="white", bbox_inches="tight")
    finally:
        plt.close(fig)
    logger.debug("Rendered %s graph to %s", graph.graph.get("name", "graph"), path)
    return path


__all__ = [
    "CONTAINER_FILL",
    "NETWORK_FILL",
    "build_composition_graph",
    "build_network_topology_graph",
    "container_networks",
    "hierarchical_layout",
    "render_graph_png",
]
