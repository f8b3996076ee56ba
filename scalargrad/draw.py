"""Graphviz rendering of a computation graph."""
import re

from graphviz import Digraph

_RECORD_SPECIAL = re.compile(r'([{}|<>])')


def trace(root):
    # Builds a list of all nodes and edges in a graph, nodes in first-visit order
    # one edge per operand slot, so a + a gives two edges into the same '+'
    nodes, edges = [root], []
    seen = {id(root)}
    stack = [(root, iter(root._prev))]
    while stack:
        v, children = stack[-1]
        for child in children:
            edges.append((child, v))
            if id(child) not in seen:
                seen.add(id(child))
                nodes.append(child)
                stack.append((child, iter(child._prev)))
                break
        else:
            stack.pop()
    return nodes, edges


def _record_text(label):
    return _RECORD_SPECIAL.sub(r'\\\1', label)


def draw_dot(root, format='svg', rankdir='LR'):
    """
    Lay out the graph under root as a Digraph.

    Every value gets a record node showing label, data and grad. Every
    computed value also gets an operator node feeding into it, and its
    operands feed into that operator node.
    """
    if rankdir not in ('LR', 'TB'):
        raise ValueError(f"rankdir must be 'LR' or 'TB', got {rankdir!r}")
    dot = Digraph(format=format, graph_attr={'rankdir': rankdir})  # LR = left to right

    nodes, edges = trace(root)
    uids = {id(n): str(i) for i, n in enumerate(nodes)}
    for n in nodes:
        uid = uids[id(n)]
        label = "{ %s | data %.4f | grad %.4f }" % (_record_text(n.label), n.data, n.grad)
        dot.node(name=uid, label=label, shape='record')
        if not n.is_leaf():
            dot.node(name=uid + n.op_symbol, label=n.op_symbol)
            dot.edge(uid + n.op_symbol, uid)

    for n1, n2 in edges:
        # operand value -> operator node of the result
        dot.edge(uids[id(n1)], uids[id(n2)] + n2.op_symbol)

    return dot


def render(root, **kwargs) -> str:
    """DOT source for the graph under root; feed it to `dot -Tsvg` to view."""
    return draw_dot(root, **kwargs).source
