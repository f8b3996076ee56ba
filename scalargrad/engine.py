"""
Scalar autograd engine.

Every operation on a Node eagerly computes its value and records which
operands produced it, so the expression graph exists as soon as the
expression has been evaluated. backward() then walks that graph in reverse
topological order and accumulates d(root)/d(node) into every node's grad.
"""
import enum
import logging
import math

from tqdm import tqdm

logger = logging.getLogger(__name__)


class DomainError(ArithmeticError):
    """Raised when a power is undefined over the reals (e.g. 0 ** -1)."""


class Op(enum.Enum):
    NONE = ''
    ADD = '+'
    MUL = '*'
    POW = '**'
    EXP = 'exp'
    TANH = 'tanh'


def _pow(base, exponent):
    # math.pow never returns complex and raises on 0 ** -1, unlike the ** operator
    try:
        return math.pow(base, exponent)
    except (ValueError, ZeroDivisionError) as exc:
        raise DomainError(f"{base!r} ** {exponent!r} is undefined") from exc


class Node:
    """
    One scalar in the computation graph.

    data is fixed when the node is built; grad starts at 0.0 and is only
    changed by backward() and zero_grad().

    Example:
        a = Node(2.0, label='a')
        b = Node(-3.0, label='b')
        c = a * b + a
        c.backward()
        a.grad  # b + 1 = -2.0
    """

    __slots__ = ('_data', 'grad', '_prev', '_op', '_exponent', 'label')

    def __init__(self, data, _children=(), _op=Op.NONE, label='', _exponent=None):
        if isinstance(data, bool) or not isinstance(data, (int, float)):
            raise TypeError(f"Node data must be int or float, got {type(data).__name__}")
        self._data = float(data)
        self.grad = 0.0
        self._prev = tuple(_children)
        self._op = _op
        self._exponent = _exponent
        self.label = label

    @property
    def data(self):
        return self._data

    @property
    def op_symbol(self) -> str:
        """Operator label as drawn in diagrams, e.g. '+' or '**-1'."""
        if self._op is Op.POW:
            return f"**{self._exponent}"
        return self._op.value

    def is_leaf(self) -> bool:
        return self._op is Op.NONE

    def __repr__(self) -> str:
        return f"Node(data={self._data}, grad={self.grad}, label={self.label!r})"

    @staticmethod
    def _wrap(other):
        if isinstance(other, Node):
            return other
        return Node(other)

    def __add__(self, other):
        other = self._wrap(other)
        return Node(self._data + other._data, (self, other), Op.ADD)

    def __radd__(self, other):
        return self + other

    def __mul__(self, other):
        other = self._wrap(other)
        return Node(self._data * other._data, (self, other), Op.MUL)

    def __rmul__(self, other):
        return self * other

    def __pow__(self, other):
        # exponents are constants, so they never become nodes of their own
        if isinstance(other, bool) or not isinstance(other, (int, float)):
            raise TypeError(f"only int/float exponents are supported, got {type(other).__name__}")
        return Node(_pow(self._data, other), (self,), Op.POW, _exponent=other)

    def exp(self):
        return Node(math.exp(self._data), (self,), Op.EXP)

    def tanh(self):
        return Node(math.tanh(self._data), (self,), Op.TANH)

    def __neg__(self):  # -self
        return self * -1

    def __sub__(self, other):  # self - other
        return self + (-self._wrap(other))

    def __rsub__(self, other):  # other - self
        return self._wrap(other) + (-self)

    def __truediv__(self, other):  # self / other
        return self * self._wrap(other) ** -1

    def __rtruediv__(self, other):  # other / self
        return self._wrap(other) * self ** -1

    def _backward(self):
        """Push self.grad into the operands using this node's local derivative."""
        op = self._op
        if op is Op.NONE:
            if self._prev:
                logger.debug("node %r has operands but no operation, treating as leaf", self)
            return
        out_grad = self.grad
        if op is Op.ADD:
            a, b = self._prev
            a.grad += out_grad
            b.grad += out_grad
        elif op is Op.MUL:
            a, b = self._prev
            a.grad += b._data * out_grad
            b.grad += a._data * out_grad
        elif op is Op.POW:
            (a,) = self._prev
            k = self._exponent
            if k != 0:
                a.grad += k * _pow(a._data, k - 1) * out_grad
        elif op is Op.EXP:
            (a,) = self._prev
            a.grad += self._data * out_grad
        elif op is Op.TANH:
            (a,) = self._prev
            a.grad += (1 - self._data ** 2) * out_grad
        else:
            raise ValueError(f"unknown operation {op!r}")

    def backward(self, progress=False):
        return backward(self, progress=progress)

    def zero_grad(self):
        zero_grad(self)


def topo_sort(root):
    """
    Order every node reachable from root so that operands come before the
    nodes built from them.

    Depth-first post-order with an explicit stack. Nodes are tracked by
    identity since two distinct nodes may hold the same value.
    """
    topo = []
    visited = {id(root)}
    stack = [(root, iter(root._prev))]
    while stack:
        vertex, children = stack[-1]
        for child in children:
            if id(child) not in visited:
                visited.add(id(child))
                stack.append((child, iter(child._prev)))
                break
        else:
            stack.pop()
            topo.append(vertex)
    return topo


def backward(root, progress=False):
    """
    Fill in grad = d(root)/d(node) for every node reachable from root.

    The root is seeded with 1.0 unless the caller already set a nonzero
    grad on it. Gradients are accumulated, not assigned, so calling this
    twice without zero_grad() in between doubles them.

    Args:
        root: output node to differentiate.
        progress: show a tqdm bar over the reverse walk (useful for very
            large graphs).

    Returns:
        The topological order that was walked, leaves first.
    """
    if root.grad == 0:
        root.grad = 1.0
    topo = topo_sort(root)
    logger.debug("backward from %r over %d nodes", root, len(topo))
    for node in tqdm(reversed(topo), total=len(topo), desc='backward', disable=not progress):
        node._backward()
    return topo


def zero_grad(root):
    """Reset grad to 0.0 on every node reachable from root."""
    topo = topo_sort(root)
    for node in topo:
        node.grad = 0.0
    logger.debug("zeroed gradients of %d nodes", len(topo))
