import pytest
from graphviz import Digraph

from scalargrad import Node, draw_dot, render, trace


def labelled(value, label):
    n = value if isinstance(value, Node) else Node(value)
    n.label = label
    return n


def test_trace_collects_every_node_and_operand_slot():
    a = labelled(2.0, 'a')
    b = a + a
    nodes, edges = trace(b)
    assert nodes == [b, a]
    assert edges == [(a, b), (a, b)]


def test_render_layout():
    a = labelled(2.0, 'a')
    b = labelled(-3.0, 'b')
    c = labelled(a * b, 'c')
    c.backward()
    src = render(c)
    lines = src.splitlines()
    assert lines[0] == 'digraph {'
    assert 'rankdir=LR' in src
    assert lines[-1] == '}'
    assert '{ c | data -6.0000 | grad 1.0000 }' in src
    assert '{ a | data 2.0000 | grad -3.0000 }' in src
    assert '{ b | data -3.0000 | grad 2.0000 }' in src
    assert src.count('shape=record') == 3
    assert 'label="*"' in src
    # op -> value, plus one edge from each operand into the op
    assert src.count(' -> ') == 3


def test_render_leaf_has_no_operator_node():
    a = labelled(1.23456, 'a')
    src = render(a)
    assert '{ a | data 1.2346 | grad 0.0000 }' in src
    assert ' -> ' not in src
    assert 'label=' in src and src.count('label=') == 1


def test_render_shared_operand_draws_both_edges():
    a = labelled(2.0, 'a')
    b = labelled(a + a, 'b')
    b.backward()
    src = render(b)
    assert '{ a | data 2.0000 | grad 2.0000 }' in src
    assert src.count(' -> ') == 3


def test_render_neuron_operator_symbols():
    x = labelled(0.5, 'x')
    y = labelled((x ** 2).exp() / x, 'y')
    src = render(y.tanh())
    for symbol in ('label=tanh', 'label=exp', 'label="**2"', 'label="**-1"', 'label="*"'):
        assert symbol in src


def test_render_does_not_mutate():
    a = labelled(2.0, 'a')
    b = labelled(a * 3 + 1, 'b')
    b.backward()
    before = [(n.data, n.grad, n.label) for n in trace(b)[0]]
    render(b)
    after = [(n.data, n.grad, n.label) for n in trace(b)[0]]
    assert before == after


def test_draw_dot_options():
    a = labelled(1.0, 'a')
    dot = draw_dot(a.exp(), format='png', rankdir='TB')
    assert isinstance(dot, Digraph)
    assert dot.format == 'png'
    assert 'rankdir=TB' in dot.source


def test_node_ids_are_local_to_each_render():
    a = labelled(1.0, 'a')
    src1 = render(a * 2)
    b = labelled(1.0, 'a')
    src2 = render(b * 2)
    assert src1 == src2


def test_render_deep_chain():
    x = labelled(0.5, 'x')
    out = x
    for _ in range(3000):
        out = out + x
    out.backward()
    nodes, edges = trace(out)
    assert len(nodes) == 3001
    assert len(edges) == 6000
    src = render(out)
    assert '{ x | data 0.5000 | grad 3001.0000 }' in src
    assert src.count(' -> ') == 3000 + 6000


def test_draw_dot_rejects_unknown_rankdir():
    a = labelled(1.0, 'a')
    with pytest.raises(ValueError, match='rankdir'):
        draw_dot(a, rankdir='RL')


def test_record_characters_in_labels_are_escaped():
    a = labelled(1.0, 'a|b')
    b = labelled(2.0, '{x} <y>')
    src = render(labelled(a * b, 'c'))
    assert r'{ a\|b | data 1.0000' in src
    assert r'{ \{x\} \<y\> | data 2.0000' in src
