__version__ = "0.1.0"

from .errors import WilsonScoreError, InvalidArgument, ConfigurationMissing
from .metrics import score, ranking_score, wilson_interval, lower_bounds, z_from_confidence, RANKING_Z
from .params import WilsonScoreParams, load_params_yaml
from .transformer import WilsonScoreInterval
from .functions import FunctionRegistry, registry, define_udf, call_udf

__all__ = [
    "WilsonScoreError", "InvalidArgument", "ConfigurationMissing",
    "score", "ranking_score", "wilson_interval", "lower_bounds", "z_from_confidence", "RANKING_Z",
    "WilsonScoreParams", "load_params_yaml",
    "WilsonScoreInterval",
    "FunctionRegistry", "registry", "define_udf", "call_udf",
]
