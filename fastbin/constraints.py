"""Evaluation of the per-bin constraints of the binning optimisation:
minimum expected yield and maximum relative statistical uncertainty.

Violations are converted into a penalty, scaled so that it dominates the
change in the objective in the merge cost.
"""

import math
import numpy as np

from .bins import BinState
from .config import OptimizerConfig


penalty_scale = 1000.0


# -------------------------------------------------------------------------
class ConstraintEval :
  """Outcome of the constraint evaluation for one bin

  Attributes:
    passes       (bool)  : True if all constraints are satisfied
    penalty      (float) : the penalty for the violations (0 if passing)
    mu_sum       (float) : the expected yield, summed over channels
    rel_mc_worst (float) : the largest relative statistical uncertainty
  """

  def __init__(self, passes : bool = True, penalty : float = 0, mu_sum : float = 0, rel_mc_worst : float = 0) :
    self.passes = passes
    self.penalty = penalty
    self.mu_sum = mu_sum
    self.rel_mc_worst = rel_mc_worst

  def __str__(self) -> str :
    return '%s (penalty = %g, mu_sum = %g, rel_mc_worst = %g)' % ('pass' if self.passes else 'FAIL', self.penalty, self.mu_sum, self.rel_mc_worst)


def relative_uncertainty(mu : float, var : float, mu_floor : float) -> float :
  """Relative statistical uncertainty sqrt(var)/mu, infinite for mu <= 0"""
  if not mu > 0 : return math.inf
  return math.sqrt(max(var, 0))/max(mu, mu_floor)


def violation(mu : float, rel : float, config : OptimizerConfig) -> (bool, float) :
  """Check the constraints for a single yield

    Args:
      mu     : the expected yield
      rel    : its relative statistical uncertainty
      config : the optimisation settings
    Returns:
      the pair (passes, normalized violation)
  """
  passes = True
  penalty = 0
  if mu < config.mu_min :
    passes = False
    penalty += (config.mu_min - mu)/config.mu_min if config.mu_min > 0 else 1
  if config.rel_mc_max > 0 and rel > config.rel_mc_max :
    passes = False
    penalty += (rel - config.rel_mc_max)/config.rel_mc_max
  return passes, penalty


def evaluate_constraints(state : BinState, config : OptimizerConfig) -> ConstraintEval :
  """Evaluate the constraints for a bin

    In per-channel mode, each channel is checked separately and the penalty
    is the worst one over channels. Otherwise the checks apply to the yields
    and variances summed over channels.

    Args:
      state  : the bin state
      config : the optimisation settings
    Returns:
      the evaluation outcome
  """
  mu_floor = config.mu_floor_for_objective
  mu_sum = float(np.sum(state.mu))
  if config.require_per_channel_constraints :
    result = ConstraintEval(mu_sum=mu_sum)
    worst_penalty = 0
    for mu, var in zip(state.mu, state.var) :
      rel = relative_uncertainty(mu, var, mu_floor)
      result.rel_mc_worst = max(result.rel_mc_worst, rel)
      passes, penalty = violation(mu, rel, config)
      result.passes = result.passes and passes
      worst_penalty = max(worst_penalty, penalty)
    result.penalty = penalty_scale*worst_penalty
    return result

  rel = relative_uncertainty(mu_sum, float(np.sum(state.var)), mu_floor)
  passes, penalty = violation(mu_sum, rel, config)
  return ConstraintEval(passes, penalty_scale*penalty, mu_sum, rel)
