"""Module containing the :class:`FineCache` class, which holds the
fine-binned inputs of the binning optimisation in dense arrays.

The cache is built once per optimisation from the input channels, after
validating their consistency, and is read-only afterwards.
"""

import numpy as np

from .base import ConfigurationError
from .channels import TemplateChannel


# -------------------------------------------------------------------------
class FineCache :
  """Dense fine-binned inputs of the optimisation

  Array shapes use the indices c (channel), p (parameter) and i (fine bin).

  Attributes:
    edges           (np.ndarray) : fine bin boundaries, shape (n_fine + 1)
    mu              (np.ndarray) : expected yields, shape (n_channel, n_fine)
    var             (np.ndarray) : yield variances, shape (n_channel, n_fine)
    dmu             (np.ndarray) : yield derivatives, shape (n_channel, n_parameter, n_fine)
    channel_names   (list) : the channel names
    parameter_names (list) : the parameter names
    prior_sigmas    (np.ndarray) : Gaussian prior widths, shape (n_parameter)
    poi_index       (int) : index of the POI in the parameter list
  """

  def __init__(self, edges : np.ndarray, mu : np.ndarray, var : np.ndarray, dmu : np.ndarray,
               channel_names : list, parameter_names : list, prior_sigmas : np.ndarray, poi_index : int) :
    self.edges = edges
    self.mu = mu
    self.var = var
    self.dmu = dmu
    self.channel_names = channel_names
    self.parameter_names = parameter_names
    self.prior_sigmas = prior_sigmas
    self.poi_index = poi_index
    for array in [ self.edges, self.mu, self.var, self.dmu, self.prior_sigmas ] : array.setflags(write=False)

  @property
  def n_fine(self) -> int :
    return self.mu.shape[1]

  @property
  def n_channel(self) -> int :
    return self.mu.shape[0]

  @property
  def n_parameter(self) -> int :
    return self.dmu.shape[1]

  def poi_name(self) -> str :
    return self.parameter_names[self.poi_index]

  def width(self, lo : int, hi : int) -> float :
    """Width of the range spanned by fine bins lo to hi (inclusive)"""
    return self.edges[hi + 1] - self.edges[lo]

  @classmethod
  def build(cls, channels : list) -> 'FineCache' :
    """Validate the input channels and build the cache

      All channels must share the binning of the nominal histogram of the
      first channel, and define the same parameters (same names, order,
      POI flags and prior widths). At most one parameter can be the POI;
      if none is flagged, the first parameter is used.

      Args:
        channels : list of :class:`TemplateChannel` objects
      Returns:
        the new cache
      Raises:
        ConfigurationError : if the inputs are missing or inconsistent
    """
    if channels is None or len(channels) == 0 :
      raise ConfigurationError('Binning optimisation called with zero channels')
    for c, channel in enumerate(channels) :
      if not isinstance(channel, TemplateChannel) :
        raise ConfigurationError('Channel at index %d is of type %s, expected TemplateChannel' % (c, channel.__class__.__name__))
      if channel.nominal is None :
        raise ConfigurationError("Channel '%s' (index %d) has no nominal histogram" % (channel.name, c))
      channel.nominal.check("nominal histogram of channel '%s'" % channel.name)

    reference = channels[0].nominal
    for channel in channels[1:] :
      if not reference.same_binning(channel.nominal) :
        raise ConfigurationError("Channel '%s' has a different nominal binning (%d bins) than channel '%s' (%d bins); "
                                 "shared-edge optimisation requires identical fine binning" %
                                 (channel.name, channel.nbins(), channels[0].name, channels[0].nbins()))

    parameters_0 = channels[0].parameters
    if len(parameters_0) == 0 :
      raise ConfigurationError("Channel '%s' has no parameters; at least a POI is needed for the objective" % channels[0].name)
    for channel in channels[1:] :
      if len(channel.parameters) != len(parameters_0) :
        raise ConfigurationError("Channel '%s' has %d parameters, but channel '%s' has %d" %
                                 (channel.name, len(channel.parameters), channels[0].name, len(parameters_0)))
      for p, (par, par0) in enumerate(zip(channel.parameters, parameters_0)) :
        if par.name != par0.name :
          raise ConfigurationError("Parameter at index %d is '%s' in channel '%s', but '%s' in channel '%s'" %
                                   (p, par.name, channel.name, par0.name, channels[0].name))
        if bool(par.is_poi) != bool(par0.is_poi) :
          raise ConfigurationError("Parameter '%s' has inconsistent is_poi flags across channels" % par.name)
        if par.prior_sigma != par0.prior_sigma :
          raise ConfigurationError("Parameter '%s' has inconsistent prior_sigma across channels (%g vs. %g)" %
                                   (par.name, par.prior_sigma, par0.prior_sigma))

    poi_indices = [ p for p, par in enumerate(parameters_0) if par.is_poi ]
    if len(poi_indices) > 1 :
      raise ConfigurationError('Multiple parameters marked as POI (%s); exactly one is required' %
                               ', '.join([ parameters_0[p].name for p in poi_indices ]))
    poi_index = poi_indices[0] if len(poi_indices) == 1 else 0

    for channel in channels :
      for par in channel.parameters :
        try :
          par.check(channel.nominal)
        except ConfigurationError as inst :
          raise ConfigurationError("Channel '%s': %s" % (channel.name, str(inst))) from inst

    mu  = np.array([ channel.nominal.contents for channel in channels ], dtype=float)
    var = np.array([ channel.nominal.errors**2 for channel in channels ], dtype=float)
    dmu = np.array([ [ par.derivatives() for par in channel.parameters ] for channel in channels ], dtype=float)
    prior_sigmas = np.array([ par.prior_sigma for par in parameters_0 ], dtype=float)
    return FineCache(np.array(reference.edges, dtype=float), mu, var, dmu,
                     [ channel.name for channel in channels ], [ par.name for par in parameters_0 ],
                     prior_sigmas, poi_index)

  def __str__(self) -> str :
    return 'fine bins=%d channels=%d parameters=%d POI=%s' % (self.n_fine, self.n_channel, self.n_parameter, self.poi_name())
