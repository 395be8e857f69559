"""Module containing the :class:`BinState` class, which represents a
contiguous range of fine bins during the merging, and the computation
of its contribution to the Fisher information matrix.
"""

import numpy as np

from .cache import FineCache


# -------------------------------------------------------------------------
def fisher_from_sums(mu : np.ndarray, dmu : np.ndarray, mu_floor : float) -> np.ndarray :
  """Fisher information of a single bin, summed over channels

    Computes F_ab = sum_c dmu_ca dmu_cb / max(mu_c, mu_floor), the information
    of a Poisson counting measurement in each channel. The result is not
    additive over bins, since the yields enter the denominator.

    Args:
      mu       : per-channel expected yields, shape (n_channel)
      dmu      : per-channel yield derivatives, shape (n_channel, n_parameter)
      mu_floor : lower bound on the yields used as denominators
    Returns:
      the symmetric Fisher matrix, shape (n_parameter, n_parameter)
  """
  denom = np.maximum(mu, mu_floor)
  weights = np.divide(1, denom, out=np.zeros_like(denom, dtype=float), where=denom > 0)
  fisher = np.einsum('c,ca,cb->ab', weights, dmu, dmu)
  return 0.5*(fisher + fisher.T)


# -------------------------------------------------------------------------
class BinState :
  """Aggregated state of a contiguous range of fine bins

  Yields, variances and derivatives are summed over the fine bins of the
  range, and the Fisher matrix is computed from the sums.

  Attributes:
    lo     (int) : index of the first fine bin in the range
    hi     (int) : index of the last fine bin in the range (inclusive)
    mu     (np.ndarray) : summed yields, shape (n_channel)
    var    (np.ndarray) : summed variances, shape (n_channel)
    dmu    (np.ndarray) : summed derivatives, shape (n_channel, n_parameter)
    fisher (np.ndarray) : Fisher matrix, shape (n_parameter, n_parameter)
  """

  def __init__(self, lo : int, hi : int, mu : np.ndarray, var : np.ndarray, dmu : np.ndarray, mu_floor : float) :
    self.lo = lo
    self.hi = hi
    self.mu = mu
    self.var = var
    self.dmu = dmu
    self.fisher = fisher_from_sums(mu, dmu, mu_floor)

  @classmethod
  def fine(cls, cache : FineCache, i : int, mu_floor : float) -> 'BinState' :
    """Create the state of a single fine bin

      Args:
        cache    : the fine cache
        i        : the fine bin index
        mu_floor : lower bound on the yields used in the Fisher matrix
      Returns:
        the new state
    """
    return BinState(i, i, cache.mu[:, i].copy(), cache.var[:, i].copy(), cache.dmu[:, :, i].copy(), mu_floor)

  def merge(self, other : 'BinState', mu_floor : float) -> 'BinState' :
    """Merge with an adjacent state

      Args:
        other    : the state to merge with, adjacent to this one
        mu_floor : lower bound on the yields used in the Fisher matrix
      Returns:
        a new state spanning both ranges
    """
    if other.lo != self.hi + 1 and self.lo != other.hi + 1 :
      raise ValueError('Cannot merge non-adjacent bin ranges [%d, %d] and [%d, %d]' % (self.lo, self.hi, other.lo, other.hi))
    return BinState(min(self.lo, other.lo), max(self.hi, other.hi),
                    self.mu + other.mu, self.var + other.var, self.dmu + other.dmu, mu_floor)

  def __str__(self) -> str :
    return 'BinState [%d, %d] mu = %s' % (self.lo, self.hi, str(self.mu))
