"""Module containing the :class:`OptimizerConfig` class, which holds the
settings of the binning optimisation (constraints, objective options and
diagnostics).
"""

import sys

from .base import Serializable


# -------------------------------------------------------------------------
class OptimizerConfig(Serializable) :
  """Settings of the binning optimisation

  Attributes:
    mu_min      (float) : minimum expected yield in each merged bin
    rel_mc_max  (float) : maximum relative statistical uncertainty of the
                          expected yield in each merged bin (0 to disable)
    require_per_channel_constraints (bool) : if True, the constraints apply to
                          each channel separately, otherwise to the sum over channels
    profile_nuisances (bool) : if True, the objective includes the effect of
                          the nuisance parameters, otherwise they are held fixed
    mu_floor_for_objective (float) : lower bound on the bin yields used as
                          denominators in the objective and constraints
    max_bins    (int)   : maximum number of bins in the output (<= 0 to disable)
    width_penalty (float) : weight of the bin width in the merge cost, which
                          acts as a tie-breaker against wide bins
    verbosity   (int)   : verbosity of the diagnostic output
    log         (file)  : stream for the diagnostic output (default: stdout)
  """

  def __init__(self, mu_min : float = 1.0, rel_mc_max : float = 0.15, require_per_channel_constraints : bool = True,
               profile_nuisances : bool = True, mu_floor_for_objective : float = 1E-12, max_bins : int = -1,
               width_penalty : float = 0.0, verbosity : int = 0, log = None) :
    self.mu_min = mu_min
    self.rel_mc_max = rel_mc_max
    self.require_per_channel_constraints = require_per_channel_constraints
    self.profile_nuisances = profile_nuisances
    self.mu_floor_for_objective = mu_floor_for_objective
    self.max_bins = max_bins
    self.width_penalty = width_penalty
    self.verbosity = verbosity
    self.log = log

  def printout(self, *args, level : int = 1) :
    """Print a diagnostic line if the verbosity is high enough

      Args:
        args  : the objects to print, as for `print`
        level : the minimum verbosity at which the line is printed
    """
    if self.verbosity < level : return
    print(*args, file=self.log if self.log is not None else sys.stdout)

  def warning(self, *args) :
    """Print a warning line, regardless of the verbosity"""
    print('Warning:', *args, file=self.log if self.log is not None else sys.stdout)

  def __str__(self) -> str :
    return 'OptimizerConfig ' + self.string_repr(verbosity = 1)

  def string_repr(self, verbosity : int = 1, pre_indent : str = '', indent : str = '   ') -> str :
    """Return a string representation of the object

      Args:
        verbosity : verbosity of the output
        pre_indent: number of indentation spaces to add to all lines
        indent    : number of indentation spaces to add to fields of this object

      Returns:
        the description string
    """
    mode = 'per-channel' if self.require_per_channel_constraints else 'aggregate'
    rep = '%smu_min = %g, rel_mc_max = %g (%s)' % (pre_indent, self.mu_min, self.rel_mc_max, mode)
    if verbosity >= 2 :
      rep += '\n%sprofile_nuisances = %s' % (pre_indent + indent, self.profile_nuisances)
      rep += '\n%smu_floor_for_objective = %g' % (pre_indent + indent, self.mu_floor_for_objective)
      rep += '\n%smax_bins = %d' % (pre_indent + indent, self.max_bins)
      rep += '\n%swidth_penalty = %g' % (pre_indent + indent, self.width_penalty)
    return rep

  def load_dict(self, sdict : dict) -> 'OptimizerConfig' :
    """Load object information from a dictionary of markup data

      Missing entries keep their default values.

      Args:
        sdict: a dictionary containing markup data

      Returns:
        self
    """
    self.mu_min = self.load_field('mu_min', sdict, self.mu_min, [int, float])
    self.rel_mc_max = self.load_field('rel_mc_max', sdict, self.rel_mc_max, [int, float])
    self.require_per_channel_constraints = self.load_field('require_per_channel_constraints', sdict, self.require_per_channel_constraints, bool)
    self.profile_nuisances = self.load_field('profile_nuisances', sdict, self.profile_nuisances, bool)
    self.mu_floor_for_objective = self.load_field('mu_floor_for_objective', sdict, self.mu_floor_for_objective, [int, float])
    self.max_bins = self.load_field('max_bins', sdict, self.max_bins, int)
    self.width_penalty = self.load_field('width_penalty', sdict, self.width_penalty, [int, float])
    return self

  def fill_dict(self, sdict : dict) :
    """Save information to a dictionary of markup data

      Args:
         sdict: a dictionary containing markup data
    """
    sdict['mu_min'] = self.unnumpy(self.mu_min)
    sdict['rel_mc_max'] = self.unnumpy(self.rel_mc_max)
    sdict['require_per_channel_constraints'] = bool(self.require_per_channel_constraints)
    sdict['profile_nuisances'] = bool(self.profile_nuisances)
    sdict['mu_floor_for_objective'] = self.unnumpy(self.mu_floor_for_objective)
    sdict['max_bins'] = int(self.max_bins)
    sdict['width_penalty'] = self.unnumpy(self.width_penalty)
