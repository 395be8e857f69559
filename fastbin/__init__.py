from .base        import Serializable, ConfigurationError
from .histograms  import Histogram1D
from .parameters  import Parameter, DerivativeSource, DirectDerivative, FiniteDifference
from .channels    import TemplateChannel
from .config      import OptimizerConfig
from .cache       import FineCache
from .bins        import BinState, fisher_from_sums
from .objective   import sigma_poi, prior_information
from .constraints import ConstraintEval, evaluate_constraints
from .results     import BinReport, BinningResult
from .optimizer   import BinningOptimizer, MergeCandidate
from .linalg      import add_sym_in_place, invert_symmetric

import numpy as np
np.set_printoptions(linewidth=200, precision=4, suppress=True, floatmode='maxprec')
