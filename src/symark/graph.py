"""Undirected note link graph built from block-reference marks."""

import logging

from .adapters.resolver_index import NoteIndex, block_refs
from .core.model import GraphEdge, GraphNode, LinkGraph

logger = logging.getLogger(__name__)


def build_link_graph(index: NoteIndex) -> LinkGraph:
    """
    One node per note, one edge per pair of notes joined by at least one
    block reference in either direction.

    Notes are scanned in id order, so the result does not depend on how
    the index was filled.
    """
    nodes = {
        nid: GraphNode(id=nid, title=index[nid].display_title, tags=index[nid].tag_list)
        for nid in sorted(index)
    }

    edges: list[GraphEdge] = []
    seen: set[frozenset[str]] = set()
    for source in nodes:
        for ref in block_refs(index[source]):
            target = index.owner_of(ref.ref_id)
            if target is None or target == source:
                continue
            # (a, b) and (b, a) are the same edge
            pair = frozenset((source, target))
            if pair in seen:
                continue
            seen.add(pair)
            edges.append(GraphEdge(source=source, target=target))

    for edge in edges:
        nodes[edge.source].connections += 1
        nodes[edge.target].connections += 1

    logger.debug("link graph: %d nodes, %d edges", len(nodes), len(edges))
    return LinkGraph(nodes=list(nodes.values()), edges=edges)


def graph_to_dot(graph: LinkGraph) -> str:
    lines = ["graph notes {", "  node [shape=box];"]
    for node in graph.nodes:
        label = node.title.replace('"', '\\"')
        lines.append(f'  "{node.id}" [label="{label}"];')
    for edge in graph.edges:
        lines.append(f'  "{edge.source}" -- "{edge.target}";')
    lines.append("}")
    return "\n".join(lines)
