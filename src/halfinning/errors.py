"""Exception types raised by the chain estimation and simulation code."""

from __future__ import annotations

import numpy as np


class ChainError(ValueError):
    """Base class for invalid chains, states and simulations."""


class UnknownStateError(ChainError, KeyError):
    """A state that is not a valid base/outs state or is absent from a chain."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class MalformedChainError(ChainError):
    """A transition matrix that is not a valid absorbing chain."""


class SingularMatrixError(ChainError, np.linalg.LinAlgError):
    """``I - Q`` has no inverse."""


class SimulationError(ChainError):
    """A simulated half-inning did not reach three outs."""
