"""Module containing the output of the binning optimisation:

  * :class:`BinReport` : the diagnostics of one output bin.

  * :class:`BinningResult` : the optimized bin edges, the expected POI
    uncertainty and the list of bin reports.

Both support loading from / saving to markup files through the
:class:`Serializable` base class.
"""

import math
import numpy as np
import pandas as pd

from .base import Serializable
from .histograms import Histogram1D


# -------------------------------------------------------------------------
class BinReport(Serializable) :
  """Diagnostics of an output bin

  Attributes:
    low          (float) : lower edge of the bin
    high         (float) : upper edge of the bin
    mu_sum       (float) : expected yield, summed over channels
    rel_mc_worst (float) : worst relative statistical uncertainty
    passes_constraints (bool) : True if the bin satisfies the constraints
  """

  def __init__(self, low : float = 0, high : float = 0, mu_sum : float = 0, rel_mc_worst : float = 0,
               passes_constraints : bool = True) :
    self.low = low
    self.high = high
    self.mu_sum = mu_sum
    self.rel_mc_worst = rel_mc_worst
    self.passes_constraints = passes_constraints

  def bin_def(self) -> str :
    """Textual definition of the bin range, as [low, high)"""
    return '[%g, %g)' % (self.low, self.high)

  def __str__(self) -> str :
    return '%s : mu = %g, rel. MC unc. = %g%s' % (self.bin_def(), self.mu_sum, self.rel_mc_worst,
                                                  '' if self.passes_constraints else ' (FAILS constraints)')

  def load_dict(self, sdict : dict) -> 'BinReport' :
    self.low = self.load_field('low', sdict, 0, [int, float])
    self.high = self.load_field('high', sdict, 0, [int, float])
    self.mu_sum = self.load_field('mu_sum', sdict, 0, [int, float])
    self.rel_mc_worst = self.float_from_markup(self.load_field('rel_mc_worst', sdict, 0, [int, float, str]))
    self.passes_constraints = self.load_field('passes_constraints', sdict, True, bool)
    return self

  def fill_dict(self, sdict : dict) :
    sdict['low'] = self.unnumpy(self.low)
    sdict['high'] = self.unnumpy(self.high)
    sdict['mu_sum'] = self.unnumpy(self.mu_sum)
    sdict['rel_mc_worst'] = self.markup_float(self.rel_mc_worst)
    sdict['passes_constraints'] = bool(self.passes_constraints)


# -------------------------------------------------------------------------
class BinningResult(Serializable) :
  """Output of the binning optimisation

  The constraints may not all be satisfied if no further merging could help:
  check :meth:`all_pass` (or the `passes_constraints` flag of each bin) before
  using the edges.

  Attributes:
    edges (np.ndarray) : the optimized bin edges, a strictly increasing
                         subsequence of the fine edges
    expected_sigma_poi (float) : the expected POI standard deviation
                                 with the optimized binning (can be infinite)
    bins  (list) : the :class:`BinReport` for each output bin
  """

  def __init__(self, edges : np.ndarray = None, expected_sigma_poi : float = math.inf, bins : list = None) :
    self.edges = np.array(edges, dtype=float) if edges is not None else np.array([])
    self.expected_sigma_poi = expected_sigma_poi
    self.bins = bins if bins is not None else []

  def nbins(self) -> int :
    return len(self.bins)

  def all_pass(self) -> bool :
    """Check whether all output bins satisfy the constraints

      Returns:
        True if no bin fails the constraints
    """
    return all(report.passes_constraints for report in self.bins)

  def failing_bins(self) -> list :
    """Return the indices of the bins that fail the constraints

      Returns:
        the list of bin indices
    """
    return [ i for i, report in enumerate(self.bins) if not report.passes_constraints ]

  def bin_defs(self) -> list :
    """Return the textual definitions of the output bins

      Returns:
        a list of strings in the form '[low, high)'
    """
    return [ report.bin_def() for report in self.bins ]

  def report_table(self) -> pd.DataFrame :
    """Return the bin reports as a table

      Returns:
        a dataframe with one row per output bin
    """
    columns = [ 'low', 'high', 'mu_sum', 'rel_mc_worst', 'passes_constraints' ]
    return pd.DataFrame([ [ getattr(report, column) for column in columns ] for report in self.bins ], columns=columns)

  def rebin(self, hist : Histogram1D) -> Histogram1D :
    """Apply the optimized binning to a fine-binned histogram

      Args:
        hist : a histogram with the fine binning used in the optimisation
      Returns:
        the rebinned histogram
    """
    return hist.rebin(self.edges)

  def __str__(self) -> str :
    return 'BinningResult ' + self.string_repr(verbosity = 1)

  def string_repr(self, verbosity : int = 1, pre_indent : str = '', indent : str = '   ') -> str :
    """Return a string representation of the object

      Args:
        verbosity : verbosity of the output
        pre_indent: number of indentation spaces to add to all lines
        indent    : number of indentation spaces to add to fields of this object

      Returns:
        the description string
    """
    rep = '%s%d bins, expected sigma(POI) = %g' % (pre_indent, self.nbins(), self.expected_sigma_poi)
    if not self.all_pass() : rep += ', %d bin(s) FAIL constraints' % len(self.failing_bins())
    if verbosity >= 1 :
      for report in self.bins : rep += '\n%s%s' % (pre_indent + indent, str(report))
    return rep

  def load_dict(self, sdict : dict) -> 'BinningResult' :
    """Load object information from a dictionary of markup data

      Args:
        sdict: a dictionary containing markup data

      Returns:
        self
    """
    if not 'edges' in sdict : raise KeyError("Binning result must contain an 'edges' field")
    self.edges = self.load_field('edges', sdict, None, np.ndarray)
    self.expected_sigma_poi = self.float_from_markup(self.load_field('expected_sigma_poi', sdict, math.inf, [int, float, str]))
    self.bins = [ BinReport().load_dict(report) for report in sdict.get('bins', []) ]
    return self

  def fill_dict(self, sdict : dict) :
    """Save information to a dictionary of markup data

      Args:
         sdict: a dictionary containing markup data
    """
    sdict['edges'] = self.unnumpy(self.edges)
    sdict['expected_sigma_poi'] = self.markup_float(self.expected_sigma_poi)
    sdict['bins'] = [ report.dump_dict() for report in self.bins ]
