"""Finite-difference checks for the gradients computed by backward()."""
import logging

from .engine import Node, backward

logger = logging.getLogger(__name__)


class GradientMismatch(AssertionError):
    pass


def central_difference(f, *vals, arg=0, epsilon=1e-6):
    r"""
    Approximate the derivative of `f` with respect to one argument.

    Args:
        f: function from n floats to one float
        *vals: the point $x_0 \ldots x_{n-1}$ to differentiate at
        arg: index $i$ of the argument to differentiate
        epsilon: step size

    Returns:
        $(f(\ldots, x_i + \epsilon, \ldots) - f(\ldots, x_i - \epsilon, \ldots)) / 2\epsilon$
    """
    vals_plus = list(vals)
    vals_plus[arg] += epsilon
    vals_minus = list(vals)
    vals_minus[arg] -= epsilon
    return (f(*vals_plus) - f(*vals_minus)) / (2 * epsilon)


def check_gradients(f, *vals, atol=1e-4, epsilon=1e-6):
    """
    Compare backward() against central differences for f at vals.

    f takes and returns Nodes. It is called once on fresh leaves to get the
    analytic gradients, then repeatedly on leaves wrapping perturbed floats.

    Returns:
        list of (analytic, numeric) pairs, one per argument.

    Raises:
        GradientMismatch: when any pair differs by more than atol.
    """
    leaves = [Node(v, label=f"x{i}") for i, v in enumerate(vals)]
    backward(f(*leaves))

    def as_float(*xs):
        return f(*(Node(x) for x in xs)).data

    pairs = []
    for i, leaf in enumerate(leaves):
        numeric = central_difference(as_float, *vals, arg=i, epsilon=epsilon)
        logger.debug("arg %d: analytic %.6f numeric %.6f", i, leaf.grad, numeric)
        if abs(leaf.grad - numeric) > atol:
            raise GradientMismatch(f"argument {i}: backward gave {leaf.grad}, finite difference gave {numeric}")
        pairs.append((leaf.grad, numeric))
    return pairs
