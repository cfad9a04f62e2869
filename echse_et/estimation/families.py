"""Parameter families and their resolution from parameter names."""

from enum import Enum

from ..utils.exceptions import UnknownParameterError


class ParameterFamily(Enum):
    """
    Parameter groups that can be estimated from observations.

    Members are declared in resolution priority: a parameter name is
    matched against the tags in this order, so ``fcorr_a`` resolves to
    FCORR before the shorter ``f`` tag of the soil heat fraction is tried.
    """

    ALB = "alb"
    RADEX = "radex"
    FCORR = "fcorr"
    EMIS = "emis"
    F = "f"

    @classmethod
    def resolve(cls, parname: str) -> "ParameterFamily":
        """
        Find the family of a parameter name.

        Args:
            parname: Parameter or group name, e.g. ``radex_a``, ``f_day``,
                ``fcorr``, ``alb``

        Returns:
            Matching ParameterFamily

        Raises:
            UnknownParameterError: If the name contains no known tag
        """
        name = str(parname).strip().lower()
        for family in cls:
            if family.value in name:
                return family
        raise UnknownParameterError(
            f"Unknown parameter name '{parname}'. "
            "Possible choices: radex*, fcorr*, f*, emis*, alb.",
            parname=str(parname)
        )

    @property
    def variables(self) -> tuple:
        """Observed variables needed to estimate this family."""
        return REQUIRED_VARIABLES[self]


REQUIRED_VARIABLES = {
    ParameterFamily.ALB: ("rsd", "rsu"),
    ParameterFamily.RADEX: ("rx", "rsd"),
    ParameterFamily.FCORR: ("ta", "hr", "rld", "rlu", "rsd", "rx"),
    ParameterFamily.EMIS: ("rsd", "rx", "rld", "rlu", "ta", "hr"),
    ParameterFamily.F: ("rnet", "sheat"),
}


__all__ = ['ParameterFamily', 'REQUIRED_VARIABLES']
