import io
import math
import numpy as np
import pytest

from fastbin import BinningOptimizer, OptimizerConfig, TemplateChannel, Histogram1D, Parameter, ConfigurationError


def make_channel(contents, derivative = None, edges = None, errors = None, name = 'sr', nuisance = None) :
  contents = np.array(contents, dtype=float)
  edges = edges if edges is not None else np.arange(contents.size + 1, dtype=float)
  errors = errors if errors is not None else np.zeros(contents.size)
  derivative = derivative if derivative is not None else np.ones(contents.size)
  parameters = [ Parameter.from_derivative('mu', derivative, is_poi=True) ]
  if nuisance is not None : parameters.append(Parameter.from_derivative('theta', nuisance))
  return TemplateChannel(name, Histogram1D(edges, contents, errors), parameters)


def test_merges_low_yield_bins() :
  optimizer = BinningOptimizer(OptimizerConfig(mu_min=1.0, rel_mc_max=0, max_bins=-1))
  result = optimizer.optimise(make_channel([0.5, 0.5, 3.0, 3.0]))
  assert np.array_equal(result.edges, [0, 2, 3, 4])
  assert [ report.mu_sum for report in result.bins ] == pytest.approx([1.0, 3.0, 3.0])
  assert result.all_pass()
  assert result.expected_sigma_poi == pytest.approx(1/math.sqrt(4 + 2/3))


def test_single_fine_bin() :
  result = BinningOptimizer().optimise(make_channel([0.1]))
  assert np.array_equal(result.edges, [0, 1])
  assert result.nbins() == 1
  assert not result.bins[0].passes_constraints


def test_single_channel_and_list_agree() :
  optimizer = BinningOptimizer(OptimizerConfig(mu_min=2.0, rel_mc_max=0))
  channel = make_channel([0.5, 1.5, 0.2, 3.0, 0.7, 4.0])
  assert np.array_equal(optimizer.optimise(channel).edges, optimizer.optimise([ channel ]).edges)


def test_deterministic() :
  rng = np.random.default_rng(1234)
  contents = rng.uniform(0.1, 3, 25)
  channel = make_channel(contents, derivative=rng.uniform(0, 1, 25)*contents, errors=0.3*np.sqrt(contents),
                         nuisance=rng.uniform(-0.2, 0.2, 25)*contents)
  config = OptimizerConfig(mu_min=2.0, rel_mc_max=0.25)
  result1 = BinningOptimizer(config).optimise(channel)
  result2 = BinningOptimizer(config).optimise(channel)
  assert np.array_equal(result1.edges, result2.edges)
  assert result1.expected_sigma_poi == result2.expected_sigma_poi


def test_edges_and_partition() :
  rng = np.random.default_rng(42)
  n_fine = 30
  edges = np.cumsum(np.concatenate([ [ 0 ], rng.uniform(0.5, 2, n_fine) ]))
  contents = rng.exponential(1.5, n_fine)
  channel = make_channel(contents, derivative=np.linspace(0.1, 1, n_fine)*contents, edges=edges, errors=0.2*contents)
  optimizer = BinningOptimizer(OptimizerConfig(mu_min=3.0, rel_mc_max=0.1), debug=True)
  result = optimizer.optimise(channel)
  assert result.edges.size == result.nbins() + 1
  assert np.all(np.diff(result.edges) > 0)
  assert np.all(np.isin(result.edges, edges))
  assert result.edges[0] == edges[0] and result.edges[-1] == edges[-1]
  assert result.all_pass()
  assert len(optimizer.debug_data) == n_fine - result.nbins()
  assert np.array_equal(optimizer.debug_data['nbins'].values, np.arange(n_fine - 1, result.nbins() - 1, -1))
  assert optimizer.debug_data['restricted'].all()


def test_max_bins_without_failures() :
  optimizer = BinningOptimizer(OptimizerConfig(mu_min=1.0, rel_mc_max=0, max_bins=2), debug=True)
  result = optimizer.optimise(make_channel([10, 20, 30, 40, 50], derivative=[1, 2, 3, 4, 5]))
  assert result.nbins() == 2
  assert result.all_pass()
  assert not optimizer.debug_data['restricted'].any()


def test_tie_break_leftmost() :
  config = OptimizerConfig(mu_min=1.0, rel_mc_max=0, max_bins=3)
  result = BinningOptimizer(config).optimise(make_channel([4, 4, 4, 4], derivative=[4, 4, 4, 4]))
  assert np.array_equal(result.edges, [0, 2, 3, 4])


def test_width_penalty() :
  config = OptimizerConfig(mu_min=1.0, rel_mc_max=0, max_bins=3, width_penalty=0.1)
  result = BinningOptimizer(config).optimise(make_channel([4, 4, 4, 4], derivative=[4, 4, 4, 4], edges=[0, 1, 3, 4, 5]))
  assert np.array_equal(result.edges, [0, 1, 3, 5])


def test_unsatisfiable_constraints() :
  log = io.StringIO()
  config = OptimizerConfig(mu_min=1.0, rel_mc_max=0, verbosity=1, log=log)
  result = BinningOptimizer(config).optimise(make_channel([0.1, 0.1, 0.2]))
  assert np.array_equal(result.edges, [0, 3])
  assert not result.all_pass()
  assert result.failing_bins() == [ 0 ]
  assert 'Warning' in log.getvalue()
  assert 'all constraints pass: False' in log.getvalue()


def test_verbose_output() :
  log = io.StringIO()
  config = OptimizerConfig(mu_min=1.0, rel_mc_max=0, verbosity=2, log=log)
  BinningOptimizer(config).optimise(make_channel([0.5, 0.5, 3.0, 3.0]))
  output = log.getvalue()
  assert 'fine bins=4 channels=1 parameters=1 POI=mu' in output
  assert 'iter=1 bins=3' in output
  assert 'converged to 3 bins' in output
  assert 'all constraints pass: True' in output
  assert 'Warning' not in output


def test_profiled_sigma() :
  channel = make_channel([10, 10, 10, 10], derivative=[1, 2, 3, 1], nuisance=[1, 1, 1, 1])
  profiled = BinningOptimizer(OptimizerConfig(rel_mc_max=0)).optimise(channel)
  fixed = BinningOptimizer(OptimizerConfig(rel_mc_max=0, profile_nuisances=False)).optimise(channel)
  assert profiled.nbins() == 4 and fixed.nbins() == 4
  assert profiled.expected_sigma_poi == pytest.approx(math.sqrt(0.4/0.11))
  assert fixed.expected_sigma_poi == pytest.approx(1/math.sqrt(1.5))


def test_joint_channels() :
  channels = [ make_channel([0.5, 0.5, 3.0, 3.0], name='a'), make_channel([3.0, 3.0, 3.0, 3.0], name='b') ]
  per_channel = BinningOptimizer(OptimizerConfig(mu_min=1.0, rel_mc_max=0)).optimise(channels)
  assert np.array_equal(per_channel.edges, [0, 2, 3, 4])
  assert per_channel.bins[0].mu_sum == pytest.approx(7)
  aggregate = BinningOptimizer(OptimizerConfig(mu_min=1.0, rel_mc_max=0, require_per_channel_constraints=False)).optimise(channels)
  assert np.array_equal(aggregate.edges, [0, 1, 2, 3, 4])


def test_relative_uncertainty_merging() :
  config = OptimizerConfig(mu_min=0, rel_mc_max=0.5)
  result = BinningOptimizer(config).optimise(make_channel([1, 1, 8, 8], errors=[1, 1, 1, 1]))
  assert result.all_pass()
  assert np.array_equal(result.edges, [0, 3, 4])
  assert all(report.rel_mc_worst <= 0.5 for report in result.bins)


def test_insensitive_poi_still_merges() :
  result = BinningOptimizer(OptimizerConfig(mu_min=1.0, rel_mc_max=0)).optimise(make_channel([0.5, 0.5, 3.0, 3.0], derivative=[0, 0, 0, 0]))
  assert np.array_equal(result.edges, [0, 2, 3, 4])
  assert result.expected_sigma_poi == math.inf


def test_configuration_errors_propagate() :
  with pytest.raises(ConfigurationError) :
    BinningOptimizer().optimise([])
  with pytest.raises(ConfigurationError) :
    BinningOptimizer().optimise([ make_channel([1, 2]), make_channel([1, 2, 3]) ])
