"""Result containers for parameter estimation."""

from dataclasses import asdict, dataclass, fields
from typing import Dict, Tuple

import pandas as pd


class _Estimate:
    """Shared conversions for estimate dataclasses."""

    def as_tuple(self) -> tuple:
        return tuple(getattr(self, f.name) for f in fields(self) if f.name in self._values)

    def as_dict(self) -> Dict[str, float]:
        return {k: v for k, v in asdict(self).items() if k in self._values}


@dataclass(frozen=True)
class AlbedoEstimate(_Estimate):
    """Albedo of the surface."""
    alb: float
    n_samples: int = 0

    _values = ("alb",)


@dataclass(frozen=True)
class RadexEstimate(_Estimate):
    """Coefficients of the clear-sky radiation ratio (radex_a + radex_b * ...)."""
    a: float  # lower quantile of rsd/rx
    b: float  # maximum hourly ratio minus a
    r_max: float = float("nan")
    quantile: float = 0.05

    _values = ("a", "b")

    def as_dict(self) -> Dict[str, float]:
        return {"radex_a": self.a, "radex_b": self.b}


@dataclass(frozen=True)
class FcorrEstimate(_Estimate):
    """Cloudiness correction coefficients for one emissivity method."""
    method: str
    a: float  # slope, equals 1 - b
    b: float  # intercept of the regression

    _values = ("a", "b")

    def as_dict(self) -> Dict[str, float]:
        return {"fcorr_a": self.a, "fcorr_b": self.b}


@dataclass(frozen=True)
class FcorrResult:
    """Cloudiness correction coefficients for each requested method."""
    estimates: Tuple[FcorrEstimate, ...]

    def __getitem__(self, method: str) -> FcorrEstimate:
        for estimate in self.estimates:
            if estimate.method == method:
                return estimate
        raise KeyError(method)

    def __iter__(self):
        return iter(self.estimates)

    def __len__(self) -> int:
        return len(self.estimates)

    def as_tuple(self) -> tuple:
        """Coefficients of the only method, or one (a, b) pair per method."""
        if len(self.estimates) == 1:
            return self.estimates[0].as_tuple()
        return tuple(e.as_tuple() for e in self.estimates)

    def as_dict(self) -> Dict[str, Dict[str, float]]:
        return {e.method: e.as_dict() for e in self.estimates}

    def to_frame(self) -> pd.DataFrame:
        """Table with columns Method, a, b."""
        return pd.DataFrame(
            {
                "Method": [e.method for e in self.estimates],
                "a": [e.a for e in self.estimates],
                "b": [e.b for e in self.estimates],
            }
        )


@dataclass(frozen=True)
class EmissivityEstimate(_Estimate):
    """Net emissivity coefficients (Brunt form)."""
    a: float
    b: float

    _values = ("a", "b")

    def as_dict(self) -> Dict[str, float]:
        return {"emis_a": self.a, "emis_b": self.b}


@dataclass(frozen=True)
class SoilHeatFractionEstimate(_Estimate):
    """Fraction of net radiation going into the soil, by day and by night."""
    f_day: float
    f_night: float

    _values = ("f_day", "f_night")


__all__ = [
    'AlbedoEstimate',
    'RadexEstimate',
    'FcorrEstimate',
    'FcorrResult',
    'EmissivityEstimate',
    'SoilHeatFractionEstimate',
]
