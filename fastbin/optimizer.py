"""Module containing the :class:`BinningOptimizer` class, which determines
an optimized 1D binning for binned-likelihood template fits.

The optimisation starts from the fine binning shared by all input channels,
and greedily merges adjacent bins until:

  * all bins satisfy the constraints (minimum expected yield and maximum
    relative statistical uncertainty, see :mod:`fastbin.constraints`), and

  * the number of bins does not exceed the configured maximum, if any.

At each step, the merge with the lowest cost is performed. The cost is the
increase in the expected POI uncertainty (see :mod:`fastbin.objective`),
plus a penalty for the constraint violations of the merged bin, plus an
optional penalty on its width. While some bins fail the constraints, only
merges involving a failing bin are considered.
"""

import math
import numpy as np
import pandas as pd

from .config import OptimizerConfig
from .channels import TemplateChannel
from .cache import FineCache
from .bins import BinState
from .objective import sigma_poi
from .constraints import evaluate_constraints
from .linalg import add_sym_in_place
from .results import BinReport, BinningResult


# -------------------------------------------------------------------------
class MergeCandidate :
  """A possible merge of two adjacent bins

  Attributes:
    index   (int) : index of the left bin of the pair
    merged  (BinState) : the merged state
    fisher  (np.ndarray) : the total Fisher matrix after the merge
    sigma   (float) : the expected POI uncertainty after the merge
    penalty (float) : the constraint penalty of the merged bin
    cost    (float) : the merge cost
  """

  def __init__(self, index : int, merged : BinState, fisher : np.ndarray, sigma : float, penalty : float, cost : float) :
    self.index = index
    self.merged = merged
    self.fisher = fisher
    self.sigma = sigma
    self.penalty = penalty
    self.cost = cost


# -------------------------------------------------------------------------
class BinningOptimizer :
  """Greedy adjacent-bin merger for 1D template binnings

  Attributes:
     config (OptimizerConfig) : the optimisation settings
     debug  (bool) : if True, record the merge history and check the
                     bin partition at each iteration
     debug_data (pd.DataFrame) : the merge history of the last optimisation,
                     one row per merge (filled only in debug mode)
  """

  def __init__(self, config : OptimizerConfig = None, debug : bool = False) :
    """Initialize the BinningOptimizer object

      Args:
        config : the optimisation settings (default: default settings)
        debug  : if True, record debug information
    """
    self.config = config if config is not None else OptimizerConfig()
    self.debug = debug
    self.debug_data = pd.DataFrame()

  def optimise(self, channels) -> BinningResult :
    """Run the optimisation

      Args:
        channels : a :class:`TemplateChannel`, or a list of them sharing
                   the same fine binning and parameters
      Returns:
        the optimisation result
      Raises:
        ConfigurationError : if the inputs are missing or inconsistent
    """
    if isinstance(channels, TemplateChannel) : channels = [ channels ]
    cache = FineCache.build(channels)
    cfg = self.config
    cfg.printout('== BinningOptimizer: %s' % str(cache), level=1)

    floor = cfg.mu_floor_for_objective
    bins = [ BinState.fine(cache, i, floor) for i in range(0, cache.n_fine) ]
    total_fisher = np.zeros((cache.n_parameter, cache.n_parameter))
    for state in bins : add_sym_in_place(total_fisher, state.fisher, +1)
    sigma_current = self.sigma(total_fisher, cache)

    history = []
    iteration = 0
    while len(bins) > 1 :
      fails = [ not evaluate_constraints(state, cfg).passes for state in bins ]
      any_failing = any(fails)
      too_many_bins = cfg.max_bins > 0 and len(bins) > cfg.max_bins
      if not any_failing and not too_many_bins : break
      iteration += 1

      best = self.best_merge(bins, total_fisher, sigma_current, cache, fails if any_failing else None)
      restricted = any_failing
      if best is None and any_failing :
        best = self.best_merge(bins, total_fisher, sigma_current, cache)
        restricted = False
      if best is None :
        cfg.printout('== BinningOptimizer: no valid merge candidate at iteration %d, stopping.' % iteration, level=1)
        break

      total_fisher = best.fisher
      bins[best.index] = best.merged
      del bins[best.index + 1]
      sigma_current = best.sigma

      if self.debug :
        self.check_partition(bins, cache.n_fine)
        history.append({ 'iteration' : iteration, 'nbins' : len(bins), 'merged_low' : best.merged.lo, 'merged_high' : best.merged.hi,
                         'cost' : best.cost, 'sigma' : best.sigma, 'penalty' : best.penalty, 'restricted' : restricted })
      cfg.printout('== BinningOptimizer: iter=%d bins=%d expected_sigma_poi=%g' % (iteration, len(bins), sigma_current), level=2)

    columns = [ 'iteration', 'nbins', 'merged_low', 'merged_high', 'cost', 'sigma', 'penalty', 'restricted' ]
    self.debug_data = pd.DataFrame(history, columns=columns)
    result = self.make_result(bins, sigma_current, cache)
    cfg.printout('== BinningOptimizer: converged to %d bins, expected_sigma_poi=%g, all constraints pass: %s' % (result.nbins(), sigma_current, result.all_pass()), level=1)
    if not result.all_pass() :
      cfg.warning('%d output bin(s) fail the binning constraints : %s' % (len(result.failing_bins()),
                  ', '.join([ result.bins[i].bin_def() for i in result.failing_bins() ])))
    return result

  def sigma(self, fisher : np.ndarray, cache : FineCache) -> float :
    """Expected POI uncertainty for a given total Fisher matrix"""
    return sigma_poi(fisher, cache.prior_sigmas, cache.poi_index, self.config.profile_nuisances)

  def evaluate_merge(self, bins : list, k : int, total_fisher : np.ndarray, sigma_current : float, cache : FineCache) -> MergeCandidate :
    """Evaluate the merge of bins k and k+1

      Args:
        bins          : the current list of bin states
        k             : index of the left bin of the pair
        total_fisher  : the current total Fisher matrix
        sigma_current : the current expected POI uncertainty
        cache         : the fine cache
      Returns:
        the merge candidate
    """
    cfg = self.config
    left, right = bins[k], bins[k + 1]
    merged = left.merge(right, cfg.mu_floor_for_objective)
    fisher = total_fisher.copy()
    add_sym_in_place(fisher, left.fisher, -1)
    add_sym_in_place(fisher, right.fisher, -1)
    add_sym_in_place(fisher, merged.fisher, +1)
    sigma = self.sigma(fisher, cache)
    penalty = evaluate_constraints(merged, cfg).penalty
    # equal sigmas (including both infinite) mean no change in the objective
    delta = 0 if sigma == sigma_current else sigma - sigma_current
    cost = delta + penalty + cfg.width_penalty*cache.width(merged.lo, merged.hi)
    return MergeCandidate(k, merged, fisher, sigma, penalty, cost)

  def best_merge(self, bins : list, total_fisher : np.ndarray, sigma_current : float, cache : FineCache,
                 fails : list = None) -> MergeCandidate :
    """Find the lowest-cost merge of adjacent bins

      Ties are resolved in favor of the leftmost pair. Candidates with
      an infinite or undefined cost are never selected.

      Args:
        bins          : the current list of bin states
        total_fisher  : the current total Fisher matrix
        sigma_current : the current expected POI uncertainty
        cache         : the fine cache
        fails         : per-bin constraint failure flags; if provided, only
                        pairs including at least one failing bin are considered
      Returns:
        the best candidate, or `None` if no valid candidate was found
    """
    best = None
    best_cost = math.inf
    for k in range(0, len(bins) - 1) :
      if fails is not None and not (fails[k] or fails[k + 1]) : continue
      candidate = self.evaluate_merge(bins, k, total_fisher, sigma_current, cache)
      if candidate.cost < best_cost :
        best_cost = candidate.cost
        best = candidate
    return best

  @staticmethod
  def check_partition(bins : list, n_fine : int) :
    """Check that the bin states exactly cover the fine bins, in order

      Args:
        bins   : the list of bin states
        n_fine : the number of fine bins
      Raises:
        RuntimeError : if there is a gap or an overlap
    """
    expected_lo = 0
    for state in bins :
      if state.lo != expected_lo or state.hi < state.lo :
        raise RuntimeError('Invalid bin partition: range [%d, %d] found where a bin starting at %d was expected' % (state.lo, state.hi, expected_lo))
      expected_lo = state.hi + 1
    if expected_lo != n_fine :
      raise RuntimeError('Invalid bin partition: bins cover %d fine bins out of %d' % (expected_lo, n_fine))

  def make_result(self, bins : list, sigma : float, cache : FineCache) -> BinningResult :
    """Build the optimisation result from the final bin states

      Args:
        bins  : the final list of bin states
        sigma : the final expected POI uncertainty
        cache : the fine cache
      Returns:
        the result object
    """
    edges = [ cache.edges[bins[0].lo] ] + [ cache.edges[state.hi + 1] for state in bins ]
    reports = []
    for state in bins :
      constraints = evaluate_constraints(state, self.config)
      reports.append(BinReport(float(cache.edges[state.lo]), float(cache.edges[state.hi + 1]),
                               constraints.mu_sum, constraints.rel_mc_worst, constraints.passes))
    return BinningResult(np.array(edges), sigma, reports)
