import numpy as np
import pytest

from fastbin import FineCache, TemplateChannel, Histogram1D, Parameter, ConfigurationError, DirectDerivative


def make_channel(name = 'sr', contents = (1., 2., 3.), edges = None, parameters = None) :
  edges = edges if edges is not None else np.arange(len(contents) + 1, dtype=float)
  nominal = Histogram1D(edges, contents, np.full(len(contents), 0.5))
  if parameters is None :
    parameters = [ Parameter.from_derivative('mu', np.ones(len(contents)), is_poi=True),
                   Parameter.from_derivative('bkg', 0.1*np.array(contents), prior_sigma=1) ]
  return TemplateChannel(name, nominal, parameters)


def test_build() :
  cache = FineCache.build([ make_channel('a'), make_channel('b', contents=(4., 5., 6.)) ])
  assert cache.n_fine == 3
  assert cache.n_channel == 2
  assert cache.n_parameter == 2
  assert cache.poi_index == 0
  assert cache.poi_name() == 'mu'
  assert np.array_equal(cache.edges, [0, 1, 2, 3])
  assert np.array_equal(cache.mu[1], [4, 5, 6])
  assert np.allclose(cache.var, 0.25)
  assert np.allclose(cache.dmu[1, 1], [0.4, 0.5, 0.6])
  assert np.array_equal(cache.prior_sigmas, [0, 1])
  assert cache.width(0, 2) == 3


def test_cache_is_read_only() :
  cache = FineCache.build([ make_channel() ])
  with pytest.raises(ValueError) :
    cache.mu[0, 0] = 10


def test_finite_difference() :
  nominal = Histogram1D([0, 1, 2], [9, 9], [0, 0])
  par = Parameter.from_variations('mu', up=[10, 10], down=[8, 8], step=0.5, is_poi=True)
  cache = FineCache.build([ TemplateChannel('sr', nominal, [ par ]) ])
  assert np.array_equal(cache.dmu[0, 0], [2.0, 2.0])


def test_finite_difference_histograms() :
  nominal = Histogram1D([0, 1, 2], [9, 9])
  par = Parameter.from_variations('mu', up=Histogram1D([0, 1, 2], [12, 10]), down=Histogram1D([0, 1, 2], [6, 10]), step=1.5)
  cache = FineCache.build([ TemplateChannel('sr', nominal, [ par ]) ])
  assert np.allclose(cache.dmu[0, 0], [2.0, 0.0])


def test_poi_selection() :
  parameters = [ Parameter.from_derivative('np', np.ones(3)), Parameter.from_derivative('mu', np.ones(3), is_poi=True) ]
  assert FineCache.build([ make_channel(parameters=parameters) ]).poi_index == 1
  parameters = [ Parameter.from_derivative('a', np.ones(3)), Parameter.from_derivative('b', np.ones(3)) ]
  assert FineCache.build([ make_channel(parameters=parameters) ]).poi_index == 0


def test_no_channels() :
  with pytest.raises(ConfigurationError) :
    FineCache.build([])
  with pytest.raises(ConfigurationError) :
    FineCache.build(None)


def test_missing_nominal() :
  with pytest.raises(ConfigurationError) :
    FineCache.build([ make_channel(), TemplateChannel('empty', None, []) ])


def test_binning_mismatch() :
  with pytest.raises(ConfigurationError, match='binning') :
    FineCache.build([ make_channel('a'), make_channel('b', contents=(1., 2., 3., 4.)) ])
  with pytest.raises(ConfigurationError, match='binning') :
    FineCache.build([ make_channel('a'), make_channel('b', edges=[0, 1, 2.5, 3]) ])


def test_no_parameters() :
  with pytest.raises(ConfigurationError) :
    FineCache.build([ make_channel(parameters=[]) ])


def test_inconsistent_parameters() :
  ref = make_channel('a')
  fewer = make_channel('b', parameters=[ Parameter.from_derivative('mu', np.ones(3), is_poi=True) ])
  renamed = make_channel('b', parameters=[ Parameter.from_derivative('mu', np.ones(3), is_poi=True),
                                           Parameter.from_derivative('other', np.ones(3), prior_sigma=1) ])
  poi_flag = make_channel('b', parameters=[ Parameter.from_derivative('mu', np.ones(3)),
                                            Parameter.from_derivative('bkg', np.ones(3), prior_sigma=1) ])
  prior = make_channel('b', parameters=[ Parameter.from_derivative('mu', np.ones(3), is_poi=True),
                                         Parameter.from_derivative('bkg', np.ones(3), prior_sigma=2) ])
  for other in [ fewer, renamed, poi_flag, prior ] :
    with pytest.raises(ConfigurationError) :
      FineCache.build([ ref, other ])


def test_multiple_pois() :
  parameters = [ Parameter.from_derivative('a', np.ones(3), is_poi=True), Parameter.from_derivative('b', np.ones(3), is_poi=True) ]
  with pytest.raises(ConfigurationError, match='POI') :
    FineCache.build([ make_channel(parameters=parameters) ])


def test_invalid_derivative_sources() :
  bad_parameters = [
    Parameter('mu', None),
    Parameter.from_variations('mu', up=np.ones(3), down=None),
    Parameter.from_variations('mu', up=np.ones(3), down=np.ones(3), step=0),
    Parameter.from_variations('mu', up=np.ones(3), down=np.ones(3), step=-1),
    Parameter.from_derivative('mu', np.ones(4)),
    Parameter('mu', DirectDerivative(Histogram1D([0, 1, 2, 4], [1, 1, 1]))),
    Parameter.from_derivative('mu', np.ones(3), prior_sigma=-1),
    Parameter.from_variations('mu', up=np.ones(3), down=np.ones(3), step=None),
  ]
  for par in bad_parameters :
    with pytest.raises(ConfigurationError) :
      FineCache.build([ make_channel(parameters=[ par ]) ])


def test_template_contents_must_match_edges() :
  short_derivative = Histogram1D([0, 1, 2, 3], [1., 1.], [0., 0.])
  long_up = Histogram1D([0, 1, 2, 3], [1., 1., 1., 1.], [0.]*4)
  bad_parameters = [
    Parameter('mu', DirectDerivative(short_derivative)),
    Parameter.from_variations('mu', up=long_up, down=np.ones(3), step=1),
  ]
  for par in bad_parameters :
    with pytest.raises(ConfigurationError, match='Contents of') :
      FineCache.build([ make_channel(parameters=[ par ]) ])
