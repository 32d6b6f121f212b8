import json
import math
from dataclasses import asdict, dataclass, fields

from vo2perc._config import is_real, load_object, normalize_keys
from vo2perc.errors import ConfigurationError


@dataclass(frozen=True)
class Environment:
    """
    Physical parameters of the lattice and its electrons.

    Attributes:
        beta (float): Inverse temperature. Must be > 0.
        delta (float): Energy cost of exciting (activating) an atom. Must be > 0.
        v (float): Energy gained from forming a dimer of two active atoms. Must be > 0.
        epsilon_alpha (float): On-site energy of the alpha orbital.
        epsilon_beta (float): On-site energy of the beta orbital.
        t_alpha (float): Hopping of the alpha orbital in the dimer direction.
        t_beta_dimer (float): Hopping of the beta orbital in the dimer direction.
        t_beta_diag (float): Hopping of the beta orbital in the diagonal directions.

    Note:
        Environments are usually read from JSON, using either the field names or the capitalized keys
        of older parameter files:

        ```python
        env = Environment.from_string('{"Beta" : 1.0, "Delta" : 1.0, "V" : 0.5}')
        ```
    """
    beta: float
    delta: float
    v: float
    epsilon_alpha: float = 0.0
    epsilon_beta: float = 0.0
    t_alpha: float = 0.0
    t_beta_dimer: float = 0.0
    t_beta_diag: float = 0.0

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if not is_real(value):
                raise ConfigurationError(f"Environment.{f.name} must be a number, got {value!r}")
            if not math.isfinite(value):
                raise ConfigurationError(f"Environment.{f.name} must be finite, got {value}")
            object.__setattr__(self, f.name, float(value))
        for name in ("beta", "delta", "v"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"Environment.{name} must be positive, got {getattr(self, name)}")

    @classmethod
    def from_dict(cls, values):
        try:
            return cls(**normalize_keys(cls, values))
        except TypeError as e:
            raise ConfigurationError(f"Incomplete environment {values}: {e}") from e

    @classmethod
    def from_string(cls, data: str):
        return cls.from_dict(load_object(data, "Environment"))

    @classmethod
    def from_json(cls, path):
        with open(path, "r") as f:
            return cls.from_string(f.read())

    def to_dict(self):
        return asdict(self)

    def to_json(self, path):
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=4)
