"""Computation of the binning objective: the expected uncertainty on the
parameter of interest (POI), estimated from the Fisher information matrix.
"""

import math
import numpy as np

from .linalg import invert_symmetric


# -------------------------------------------------------------------------
def prior_information(prior_sigmas : np.ndarray) -> np.ndarray :
  """Information provided by Gaussian priors on the parameters

    Args:
      prior_sigmas : the prior widths, 0 for unconstrained parameters
    Returns:
      the per-parameter prior information 1/sigma^2, 0 where no prior is defined
  """
  prior_sigmas = np.asarray(prior_sigmas, dtype=float)
  return np.divide(1, prior_sigmas**2, out=np.zeros_like(prior_sigmas), where=prior_sigmas > 0)


def sigma_poi(fisher : np.ndarray, prior_sigmas : np.ndarray, poi_index : int, profile_nuisances : bool = True) -> float :
  """Expected standard deviation of the POI

    If `profile_nuisances` is False, the nuisance parameters are held fixed and
    the result is 1/sqrt(F_pp), including the POI prior if any.
    Otherwise the prior information is added to the diagonal of the full
    matrix, which is inverted, and the result is the square root of the POI
    diagonal element of the covariance.

    Degenerate cases (failed inversion, non-positive or non-finite
    information or variance) give an infinite result.

    Args:
      fisher            : the Fisher matrix, without priors
      prior_sigmas      : the Gaussian prior widths (0 for none)
      poi_index         : index of the POI
      profile_nuisances : whether to profile the nuisance parameters
    Returns:
      the expected POI standard deviation
  """
  n_parameter = fisher.shape[0]
  if n_parameter <= 0 : return math.inf
  priors = prior_information(prior_sigmas)

  if not profile_nuisances :
    info = fisher[poi_index, poi_index] + priors[poi_index]
    if not info > 0 or not math.isfinite(info) : return math.inf
    return 1/math.sqrt(info)

  total = fisher + np.diag(priors)
  covariance = invert_symmetric(total)
  if covariance is None : return math.inf
  variance = covariance[poi_index, poi_index]
  if not variance > 0 or not math.isfinite(variance) : return math.inf
  return math.sqrt(variance)
