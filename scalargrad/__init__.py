from .engine import DomainError, Node, Op, backward, topo_sort, zero_grad
from .draw import draw_dot, render, trace
from .gradcheck import GradientMismatch, central_difference, check_gradients

__all__ = [
    'DomainError', 'Node', 'Op', 'backward', 'topo_sort', 'zero_grad',
    'draw_dot', 'render', 'trace',
    'GradientMismatch', 'central_difference', 'check_gradients',
]
