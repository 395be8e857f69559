"""Module containing the :class:`Histogram1D` class, the fine-binned
input container of the binning optimisation.

A histogram stores its bin edges, the per-bin contents (expected yields)
and the per-bin statistical errors. It supports loading from / saving to
markup files through the :class:`Serializable` base class.
"""

import numpy as np

from .base import Serializable, ConfigurationError


# -------------------------------------------------------------------------
class Histogram1D(Serializable) :
  """Class representing a 1D histogram with variable-width bins

  Attributes:
     edges    (np.ndarray) : the bin boundaries, of size `nbins + 1`, strictly increasing
     contents (np.ndarray) : the per-bin contents
     errors   (np.ndarray) : the per-bin statistical errors
  """

  edge_eps = 1E-12

  def __init__(self, edges : np.ndarray = None, contents : np.ndarray = None, errors : np.ndarray = None) :
    """Create a new histogram

      If `errors` is not provided, Poisson errors sqrt(|contents|) are used.

      Args:
        edges    : the bin boundaries
        contents : the per-bin contents
        errors   : the per-bin statistical errors (optional)
    """
    self.edges = np.array(edges, dtype=float) if edges is not None else np.array([])
    self.contents = np.array(contents, dtype=float) if contents is not None else np.zeros(max(self.edges.size - 1, 0))
    if errors is not None :
      self.errors = np.array(errors, dtype=float)
    else :
      self.errors = np.sqrt(np.abs(self.contents))

  @classmethod
  def from_root(cls, hist) -> 'Histogram1D' :
    """Build a histogram from a ROOT TH1 object

      Only the TH1 accessors are used, so any object with the same interface
      is accepted. Under- and overflow bins are ignored.

      Args:
        hist : the TH1 object
      Returns:
        the new histogram
    """
    n = hist.GetNbinsX()
    axis = hist.GetXaxis()
    edges = [ axis.GetBinLowEdge(i) for i in range(1, n + 1) ] + [ axis.GetBinUpEdge(n) ]
    contents = [ hist.GetBinContent(i) for i in range(1, n + 1) ]
    errors = [ hist.GetBinError(i) for i in range(1, n + 1) ]
    return Histogram1D(edges, contents, errors)

  def nbins(self) -> int :
    """Returns the number of bins

      Returns:
        the number of bins
    """
    return max(self.edges.size - 1, 0)

  def check(self, name : str = 'histogram') :
    """Check the consistency of the histogram definition

      Args:
        name : the name used to identify the histogram in error messages
      Raises:
        ConfigurationError : if the edges are not a strictly increasing list
          of at least 2 values, or the contents/errors do not match them.
    """
    if self.edges.ndim != 1 or self.edges.size < 2 :
      raise ConfigurationError("Binning of %s must contain at least 2 edges, got %d." % (name, self.edges.size))
    if not np.all(np.isfinite(self.edges)) or np.any(np.diff(self.edges) <= 0) :
      raise ConfigurationError("Bin edges of %s must be finite and strictly increasing, got %s." % (name, str(self.edges)))
    if self.contents.shape != (self.nbins(),) :
      raise ConfigurationError("Contents of %s have shape %s, expected (%d,) from the binning." % (name, str(self.contents.shape), self.nbins()))
    if self.errors.shape != (self.nbins(),) :
      raise ConfigurationError("Errors of %s have shape %s, expected (%d,) from the binning." % (name, str(self.errors.shape), self.nbins()))

  def same_binning(self, other : 'Histogram1D', eps : float = None) -> bool :
    """Check whether another histogram has the same binning

      Args:
        other : the histogram to compare to
        eps   : absolute tolerance on each edge (default: `edge_eps`)
      Returns:
        True if the bin counts are equal and all edges agree within `eps`
    """
    if eps is None : eps = Histogram1D.edge_eps
    if self.nbins() != other.nbins() : return False
    return bool(np.all(np.abs(self.edges - other.edges) <= eps))

  def edge_indices(self, edges : np.ndarray) -> np.ndarray :
    """Locate a coarser list of edges within the histogram binning

      Args:
        edges : the coarse edges, which must be a subsequence of the histogram
                edges starting and ending on the histogram range boundaries
      Returns:
        the indices of the coarse edges in the histogram edge array
      Raises:
        ValueError : if the coarse edges do not match the histogram binning
    """
    edges = np.array(edges, dtype=float)
    if edges.ndim != 1 or edges.size < 2 :
      raise ValueError('Rebinning requires at least 2 edges, got %s' % str(edges))
    indices = np.searchsorted(self.edges, edges - Histogram1D.edge_eps)
    for edge, index in zip(edges, indices) :
      if index >= self.edges.size or abs(self.edges[index] - edge) > Histogram1D.edge_eps :
        raise ValueError('Edge %g does not match any bin boundary of the histogram' % edge)
    if indices[0] != 0 or indices[-1] != self.edges.size - 1 :
      raise ValueError('Rebinning edges [%g, %g] do not cover the histogram range [%g, %g]' % (edges[0], edges[-1], self.edges[0], self.edges[-1]))
    if np.any(np.diff(indices) <= 0) :
      raise ValueError('Rebinning edges must be strictly increasing, got %s' % str(edges))
    return indices

  def rebin(self, edges : np.ndarray) -> 'Histogram1D' :
    """Merge the histogram bins into a coarser binning

      Contents are summed and errors added in quadrature over the fine bins
      contained in each coarse bin.

      Args:
        edges : the coarse edges (see :meth:`edge_indices`)
      Returns:
        a new histogram with the coarse binning
    """
    indices = self.edge_indices(edges)
    contents = np.add.reduceat(self.contents, indices[:-1])
    errors = np.sqrt(np.add.reduceat(self.errors**2, indices[:-1]))
    return Histogram1D(self.edges[indices], contents, errors)

  def __str__(self) -> str :
    """Returns a description string

      Returns:
        the object description
    """
    return 'Histogram1D ' + self.string_repr(verbosity = 1)

  def string_repr(self, verbosity : int = 1, pre_indent : str = '', indent : str = '   ') -> str :
    """Return a string representation of the object

      Args:
        verbosity : verbosity of the output
        pre_indent: number of indentation spaces to add to all lines
        indent    : number of indentation spaces to add to fields of this object

      Returns:
        the description string
    """
    rep = '%s%d bins' % (pre_indent, self.nbins())
    if self.nbins() > 0 : rep += ' in [%g, %g]' % (self.edges[0], self.edges[-1])
    if verbosity >= 2 :
      for i in range(0, self.nbins()) :
        rep += '\n%s[%g, %g) : %g +/- %g' % (pre_indent + indent, self.edges[i], self.edges[i+1], self.contents[i], self.errors[i])
    return rep

  def load_dict(self, sdict : dict) -> 'Histogram1D' :
    """Load object information from a dictionary of markup data

      Args:
        sdict: a dictionary containing markup data

      Returns:
        self
    """
    if not 'edges' in sdict : raise KeyError("Histogram definition must contain an 'edges' field")
    if not 'contents' in sdict : raise KeyError("Histogram definition must contain a 'contents' field")
    self.edges = self.load_field('edges', sdict, None, np.ndarray)
    self.contents = self.load_field('contents', sdict, None, np.ndarray)
    self.errors = self.load_field('errors', sdict, None, np.ndarray)
    if self.errors is None : self.errors = np.sqrt(np.abs(self.contents))
    return self

  def fill_dict(self, sdict : dict) :
    """Save information to a dictionary of markup data

      Args:
         sdict: a dictionary containing markup data
    """
    sdict['edges'] = self.unnumpy(self.edges)
    sdict['contents'] = self.unnumpy(self.contents)
    sdict['errors'] = self.unnumpy(self.errors)
