from typing import Callable

import jax
import jax.numpy as jnp
from scipy.optimize import brentq

jax.config.update("jax_enable_x64", True)

from vo2perc.errors import NonConvergenceError, RootNotBracketedError

SOLVE_1D_MAX_ITER = 1024


def fermi(e, beta, mu):
    return 1 / (jnp.exp(beta * (e - mu)) + 1)


def fermi_dist(x):
    """Fermi distribution `1 / (1 + e^x)` in units where the energies already carry beta."""
    return fermi(x, 1.0, 0.0)


def solve_1d(f: Callable[[float], float], left: float, right: float, eps_abs: float, eps_rel: float, max_iter: int = SOLVE_1D_MAX_ITER) -> float:
    """Finds the root of `f` bracketed by `left` and `right` with Brent's method.

    Parameters:
        f (Callable[[float], float]): continuous function with a sign change in [left, right]
        left (float): lower end of the bracket
        right (float): upper end of the bracket
        eps_abs (float): absolute tolerance on the root
        eps_rel (float): relative tolerance on the root
        max_iter (int): iteration budget

    Returns:
        float: the root

    Raises:
        RootNotBracketedError: `f(left)` and `f(right)` have the same sign
        NonConvergenceError: the tolerance was not reached within `max_iter` iterations
    """
    f_left, f_right = float(f(left)), float(f(right))
    if (f_left > 0 and f_right > 0) or (f_left < 0 and f_right < 0):
        raise RootNotBracketedError(
            f"[{left}, {right}] does not bracket a root: f(left) = {f_left}, f(right) = {f_right}"
        )
    if f_left == 0:
        return float(left)
    if f_right == 0:
        return float(right)

    root, result = brentq(
        lambda x: float(f(x)),
        left,
        right,
        xtol=eps_abs,
        rtol=eps_rel,
        maxiter=max_iter,
        full_output=True,
        disp=False,
    )
    if not result.converged:
        raise NonConvergenceError(
            f"Root finder stopped after {result.iterations} iterations without reaching the requested accuracy ({result.flag})"
        )
    return float(root)
