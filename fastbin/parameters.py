"""Module containing the description of the fit parameters entering the
binning objective:

  * :class:`DerivativeSource` : the base class for the sources of per-bin
    yield derivatives, with two implementations

    * :class:`DirectDerivative` : a precomputed derivative histogram.

    * :class:`FiniteDifference` : up/down varied yields and a step size,
      from which the derivative is computed as a central difference.

  * :class:`Parameter` : a POI or nuisance parameter, with its derivative
    source and its Gaussian prior width.

The derivative sources are resolved into plain per-bin arrays once, when
the fine cache is built (see :class:`fastbin.cache.FineCache`).
"""

import numbers
import numpy as np
from abc import abstractmethod

from .base import Serializable, ConfigurationError
from .histograms import Histogram1D


# -------------------------------------------------------------------------
def _values(template) -> np.ndarray :
  if isinstance(template, Histogram1D) : return template.contents
  return np.array(template, dtype=float)


def _check_template(template, nominal : Histogram1D, what : str) :
  if template is None :
    raise ConfigurationError('%s is missing' % what)
  if isinstance(template, Histogram1D) :
    template.check(what)
    if not nominal.same_binning(template) :
      raise ConfigurationError('%s has different binning than the nominal histogram' % what)
    return
  values = np.array(template, dtype=float)
  if values.shape != (nominal.nbins(),) :
    raise ConfigurationError('%s has shape %s, but the nominal histogram has %d bins' % (what, str(values.shape), nominal.nbins()))


def _template_dict(template) :
  if isinstance(template, Histogram1D) : return template.dump_dict()
  return Serializable.unnumpy(np.array(template, dtype=float))


def _template_from_markup(value) :
  if isinstance(value, dict) : return Histogram1D().load_dict(value)
  return np.array(value, dtype=float)


# -------------------------------------------------------------------------
class DerivativeSource :
  """Base class for the sources of per-bin yield derivatives

  Derived classes implement :meth:`check` to validate their inputs against
  the nominal binning, and :meth:`resolve` to compute the per-bin
  derivative array.
  """

  @abstractmethod
  def check(self, nominal : Histogram1D, name : str = '') :
    """Validate the source against the nominal histogram

      Args:
        nominal : the nominal histogram of the channel
        name    : a label used in error messages
      Raises:
        ConfigurationError : if the source is incomplete or inconsistent
    """
    pass

  @abstractmethod
  def resolve(self) -> np.ndarray :
    """Compute the per-bin derivatives

      Returns:
        the derivative of the expected yield in each bin
    """
    pass

  @abstractmethod
  def fill_dict(self, sdict : dict) :
    pass


# -------------------------------------------------------------------------
class DirectDerivative(DerivativeSource) :
  """Derivative source given directly as a per-bin derivative template

  Attributes:
    derivative (Histogram1D or np.ndarray) : the per-bin derivatives
  """

  def __init__(self, derivative = None) :
    self.derivative = derivative

  def check(self, nominal : Histogram1D, name : str = '') :
    _check_template(self.derivative, nominal, 'Derivative template of parameter %s' % name)

  def resolve(self) -> np.ndarray :
    return _values(self.derivative).copy()

  def fill_dict(self, sdict : dict) :
    sdict['derivative'] = _template_dict(self.derivative)


# -------------------------------------------------------------------------
class FiniteDifference(DerivativeSource) :
  """Derivative source given by up/down varied templates

  The derivative is computed as the central difference (up - down)/(2*step).

  Attributes:
    up   (Histogram1D or np.ndarray) : the yields for a +step variation of the parameter
    down (Histogram1D or np.ndarray) : the yields for a -step variation of the parameter
    step (float) : the size of the parameter variation, must be > 0
  """

  def __init__(self, up = None, down = None, step : float = 1) :
    self.up = up
    self.down = down
    self.step = step

  def check(self, nominal : Histogram1D, name : str = '') :
    if self.up is None or self.down is None :
      raise ConfigurationError('Parameter %s must provide either a derivative or both up and down templates' % name)
    _check_template(self.up, nominal, 'Up template of parameter %s' % name)
    _check_template(self.down, nominal, 'Down template of parameter %s' % name)
    if not isinstance(self.step, numbers.Real) or not self.step > 0 :
      raise ConfigurationError('Parameter %s has step %s, must be a number > 0 for up/down finite differences' % (name, str(self.step)))

  def resolve(self) -> np.ndarray :
    return (_values(self.up) - _values(self.down))/(2*self.step)

  def fill_dict(self, sdict : dict) :
    sdict['up'] = _template_dict(self.up)
    sdict['down'] = _template_dict(self.down)
    sdict['step'] = Serializable.unnumpy(self.step)


# -------------------------------------------------------------------------
class Parameter(Serializable) :
  """Class representing a parameter of the binning objective

  Parameters are either the single parameter of interest (POI), whose
  expected precision is optimized, or nuisance parameters, which are
  profiled in the objective if requested.

  Attributes:
     name        (str)   : the parameter name, unique within a channel
     source      (DerivativeSource) : the source of the per-bin yield derivatives
     prior_sigma (float) : width of the Gaussian prior on the parameter
                           (0 for an unconstrained parameter)
     is_poi      (bool)  : True if the parameter is the POI
  """

  def __init__(self, name : str = '', source : DerivativeSource = None, prior_sigma : float = 0,
               is_poi : bool = False) :
    """Create a new Parameter object

      Args:
        name        : the parameter name
        source      : the derivative source (:class:`DirectDerivative` or :class:`FiniteDifference`)
        prior_sigma : width of the Gaussian prior (0 for none)
        is_poi      : True if the parameter is the POI
    """
    self.name = name
    self.source = source
    self.prior_sigma = prior_sigma
    self.is_poi = is_poi

  @classmethod
  def from_derivative(cls, name : str, derivative, prior_sigma : float = 0, is_poi : bool = False) -> 'Parameter' :
    """Shortcut to define a parameter with a precomputed derivative template"""
    return Parameter(name, DirectDerivative(derivative), prior_sigma, is_poi)

  @classmethod
  def from_variations(cls, name : str, up, down, step : float = 1, prior_sigma : float = 0, is_poi : bool = False) -> 'Parameter' :
    """Shortcut to define a parameter with up/down templates"""
    return Parameter(name, FiniteDifference(up, down, step), prior_sigma, is_poi)

  def check(self, nominal : Histogram1D) :
    """Validate the parameter inputs against a nominal histogram

      Args:
        nominal : the nominal histogram of the channel
      Raises:
        ConfigurationError : if the derivative information is missing or inconsistent
    """
    if self.source is None :
      raise ConfigurationError('Parameter %s must provide either a derivative or both up and down templates' % self.name)
    if self.prior_sigma is None or self.prior_sigma < 0 :
      raise ConfigurationError('Parameter %s has invalid prior_sigma %s, must be >= 0' % (self.name, str(self.prior_sigma)))
    self.source.check(nominal, self.name)

  def derivatives(self) -> np.ndarray :
    """Return the per-bin yield derivatives

      Returns:
        the derivative array, resolved from the parameter source
    """
    return self.source.resolve()

  def __str__(self) -> str :
    return 'Parameter ' + self.string_repr(verbosity = 1)

  def string_repr(self, verbosity : int = 1, pre_indent : str = '', indent : str = '   ') -> str :
    """Return a string representation of the object

      Args:
        verbosity : verbosity of the output
        pre_indent: number of indentation spaces to add to all lines
        indent    : number of indentation spaces to add to fields of this object

      Returns:
        the description string
    """
    rep = '%s%s' % (pre_indent, self.name)
    if self.is_poi : rep += ' (POI)'
    if verbosity >= 1 :
      rep += ', free parameter' if not self.prior_sigma else ', prior sigma = %g' % self.prior_sigma
    if verbosity >= 2 :
      if isinstance(self.source, FiniteDifference) :
        rep += '\n%sderivative from up/down variations with step %g' % (pre_indent + indent, self.source.step)
      else :
        rep += '\n%sderivative given directly' % (pre_indent + indent)
    return rep

  def load_dict(self, sdict : dict) -> 'Parameter' :
    """Load object information from a dictionary of markup data

      The derivative source is given either by a 'derivative' entry, or by
      'up', 'down' and 'step' entries. Templates are given as histogram
      dicts or as plain lists of per-bin values.

      Args:
        sdict: a dictionary containing markup data

      Returns:
        self
    """
    if not 'name' in sdict : raise KeyError("Parameter definition must contain a 'name' field")
    self.name = self.load_field('name', sdict, '', str)
    self.prior_sigma = self.load_field('prior_sigma', sdict, 0, [int, float])
    self.is_poi = self.load_field('is_poi', sdict, False, bool)
    if 'derivative' in sdict :
      self.source = DirectDerivative(_template_from_markup(sdict['derivative']))
    elif 'up' in sdict or 'down' in sdict :
      up = _template_from_markup(sdict['up']) if 'up' in sdict else None
      down = _template_from_markup(sdict['down']) if 'down' in sdict else None
      self.source = FiniteDifference(up, down, self.load_field('step', sdict, 1, [int, float]))
    else :
      self.source = None
    return self

  def fill_dict(self, sdict : dict) :
    """Save information to a dictionary of markup data

      Args:
         sdict: a dictionary containing markup data
    """
    sdict['name'] = self.name
    sdict['prior_sigma'] = self.unnumpy(self.prior_sigma)
    sdict['is_poi'] = bool(self.is_poi)
    if self.source is not None : self.source.fill_dict(sdict)
