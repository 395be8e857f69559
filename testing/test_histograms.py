import numpy as np
import pytest

from fastbin import Histogram1D, ConfigurationError


class FakeAxis :
  def __init__(self, edges) : self.edges = edges
  def GetBinLowEdge(self, i) : return self.edges[i - 1]
  def GetBinUpEdge(self, i) : return self.edges[i]


class FakeTH1 :
  def __init__(self, edges, contents, errors) :
    self.axis = FakeAxis(edges)
    self.contents = [ 100. ] + contents + [ 200. ] # under/overflow
    self.errors = [ 10. ] + errors + [ 20. ]
  def GetNbinsX(self) : return len(self.axis.edges) - 1
  def GetXaxis(self) : return self.axis
  def GetBinContent(self, i) : return self.contents[i]
  def GetBinError(self, i) : return self.errors[i]


def test_default_errors() :
  hist = Histogram1D([0, 1, 2], [4, 9])
  assert hist.nbins() == 2
  assert np.allclose(hist.errors, [2, 3])


def test_check() :
  Histogram1D([0, 1, 2], [1, 1], [0, 0]).check()
  with pytest.raises(ConfigurationError) :
    Histogram1D([0, 2, 1], [1, 1]).check()
  with pytest.raises(ConfigurationError) :
    Histogram1D([0, 1, 2], [1, 1, 1], [1, 1]).check()
  with pytest.raises(ConfigurationError) :
    Histogram1D([0, 1, 2], [1, 1], [1]).check()
  with pytest.raises(ConfigurationError) :
    Histogram1D([0], []).check()


def test_same_binning() :
  hist = Histogram1D([0, 1, 2], [1, 1])
  assert hist.same_binning(Histogram1D([0, 1 + 1E-13, 2], [1, 1]))
  assert not hist.same_binning(Histogram1D([0, 1 + 1E-9, 2], [1, 1]))
  assert not hist.same_binning(Histogram1D([0, 1, 2, 3], [1, 1, 1]))


def test_rebin() :
  hist = Histogram1D([0, 1, 2, 3, 4], [1, 2, 3, 4], [1, 1, 1, 1])
  coarse = hist.rebin([0, 2, 4])
  assert np.array_equal(coarse.edges, [0, 2, 4])
  assert np.allclose(coarse.contents, [3, 7])
  assert np.allclose(coarse.errors, [np.sqrt(2), np.sqrt(2)])
  assert np.allclose(hist.rebin(hist.edges).contents, hist.contents)


def test_rebin_invalid_edges() :
  hist = Histogram1D([0, 1, 2, 3, 4], [1, 2, 3, 4])
  with pytest.raises(ValueError) :
    hist.rebin([0, 1.5, 4])
  with pytest.raises(ValueError) :
    hist.rebin([0, 2])
  with pytest.raises(ValueError) :
    hist.rebin([0, 3, 2, 4])
  with pytest.raises(ValueError) :
    hist.rebin([0, 4, 5])


def test_from_root() :
  hist = Histogram1D.from_root(FakeTH1([0., 0.5, 2.], [3., 4.], [1., 2.]))
  assert np.array_equal(hist.edges, [0, 0.5, 2])
  assert np.array_equal(hist.contents, [3, 4])
  assert np.array_equal(hist.errors, [1, 2])


@pytest.mark.parametrize('flavor', [ 'json', 'yaml' ])
def test_markup(tmp_path, flavor) :
  hist = Histogram1D([0, 1, 3], [2.5, 4], [0.5, 1.5])
  filename = str(tmp_path / ('hist.' + flavor))
  hist.save(filename)
  loaded = Histogram1D().load(filename)
  assert loaded.same_binning(hist)
  assert np.array_equal(loaded.contents, hist.contents)
  assert np.array_equal(loaded.errors, hist.errors)


def test_markup_missing_fields() :
  with pytest.raises(KeyError) :
    Histogram1D().load_dict({ 'contents' : [ 1 ] })
  hist = Histogram1D().load_dict({ 'edges' : [ 0, 1 ], 'contents' : [ 4 ] })
  assert np.allclose(hist.errors, [ 2 ])
