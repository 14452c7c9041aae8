from .node_types import Node, NodeKind, SyntaxTree


def dump_tree(tree: SyntaxTree, node: Node | None = None, indent: int = 0) -> str:
    """Render a node tree one node per line, for debugging."""
    node = tree.root if node is None else node
    pad = "  " * indent
    rng = node.range
    label = f"{node.kind.value}"
    if node.kind == NodeKind.OTHER:
        label += f"<{node.type_name}>"
    if node.is_leaf:
        label += f" {node.value!r}"
    lines = [f"{pad}{label} [{rng.line}:{rng.column}-{rng.end_line}]"]
    for child in node.children:
        if child is None:
            lines.append(f"{pad}  nil")
        else:
            lines.append(dump_tree(tree, child, indent + 1))
    return "\n".join(lines)
