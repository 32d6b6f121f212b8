class Vo2PercError(Exception):
    """Base class of all recoverable errors raised by vo2perc."""


class GridShapeError(Vo2PercError, ValueError):
    """Grid data must be rectangular and contain at least one point."""


class ConfigurationError(Vo2PercError, ValueError):
    """Physical or Monte Carlo parameters are invalid."""


class UndefinedFermiEnergyError(Vo2PercError, ValueError):
    """The Fermi energy is not defined for the requested number of particles."""


class RootNotBracketedError(Vo2PercError, ValueError):
    """The interval handed to the root finder does not contain a sign change."""


class NonConvergenceError(Vo2PercError, RuntimeError):
    """The root finder exhausted its iteration budget."""
