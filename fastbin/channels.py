"""Module containing the :class:`TemplateChannel` class, defining a
*channel* (fit region) entering the binning optimisation.

All channels of a joint optimisation share the same fine binning and the
same list of parameters. The class supports loading from / saving to
markup files through the :class:`Serializable` base class.
"""

import json, yaml

from .base import Serializable
from .histograms import Histogram1D
from .parameters import Parameter


# -------------------------------------------------------------------------
class TemplateChannel(Serializable) :
  """Class representing a fit channel

  Attributes:
     name       (str) : the channel name
     nominal    (Histogram1D) : the expected total (signal+background) yield,
                                fine-binned, with its statistical errors
     parameters (list) : the POI and nuisance parameters, as an ordered
                         list of :class:`Parameter` objects
  """

  def __init__(self, name : str = '', nominal : Histogram1D = None, parameters : list = None) :
    """Initialize the TemplateChannel object

      Args:
         name       : the channel name
         nominal    : the nominal fine-binned histogram
         parameters : the ordered list of parameters
    """
    self.name = name
    self.nominal = nominal
    self.parameters = parameters if parameters is not None else []

  def nbins(self) -> int :
    """Returns the number of fine bins in the channel

      Returns:
        the number of bins, 0 if no nominal histogram is defined
    """
    return self.nominal.nbins() if self.nominal is not None else 0

  def parameter(self, name : str) -> Parameter :
    """Access a parameter by name

    Args:
      name : the parameter name

    Returns:
      the named parameter, or `None` if not defined
    """
    for par in self.parameters :
      if par.name == name : return par
    return None

  @classmethod
  def load_channels(cls, filename : str, flavor : str = None) -> list :
    """Load a list of channels from a markup file

      The file should contain a 'channels' entry holding a list of
      channel definitions.

      Args:
        filename: name of the file to load from
        flavor  : input markup flavor (currently supported: 'json' [default], 'yaml')
      Returns:
        the list of :class:`TemplateChannel` objects
    """
    if flavor is None : flavor = cls.guess_flavor(filename, 'json')
    with open(filename, 'r') as fd :
      if flavor == 'json' :
        sdict = json.load(fd)
      elif flavor == 'yaml' :
        sdict = yaml.safe_load(fd)
      else :
        raise KeyError("Unknown markup flavor '%s',  so far only 'json' or 'yaml' are supported" % flavor)
    if not 'channels' in sdict :
      raise KeyError("No 'channels' section defined in file '%s'." % filename)
    return [ TemplateChannel().load_dict(channel) for channel in sdict['channels'] ]

  def __str__(self) -> str :
    return 'Channel ' + self.string_repr(verbosity = 1)

  def string_repr(self, verbosity : int = 1, pre_indent : str = '', indent : str = '   ') -> str :
    """Return a string representation of the object

      Args:
        verbosity : verbosity of the output
        pre_indent: number of indentation spaces to add to all lines
        indent    : number of indentation spaces to add to fields of this object

      Returns:
        the description string
    """
    rep = '%s%s : %d bins' % (pre_indent, self.name, self.nbins())
    if verbosity > 0 :
      for par in self.parameters : rep += '\n%s  o ' % pre_indent + par.string_repr(verbosity, pre_indent=pre_indent+'    ', indent=indent).lstrip()
    return rep

  def load_dict(self, sdict : dict) -> 'TemplateChannel' :
    """Load object information from a dictionary of markup data

      Args:
        sdict: a dictionary containing markup data

      Returns:
        self
    """
    if not 'name' in sdict : raise KeyError("Channel definition must contain a 'name' field")
    self.name = sdict['name']
    self.nominal = Histogram1D().load_dict(sdict['nominal']) if 'nominal' in sdict else None
    self.parameters = [ Parameter().load_dict(par) for par in sdict.get('parameters', []) ]
    return self

  def fill_dict(self, sdict : dict) :
    """Save information to a dictionary of markup data

      Args:
         sdict: a dictionary containing markup data
    """
    sdict['name'] = self.name
    if self.nominal is not None : sdict['nominal'] = self.nominal.dump_dict()
    sdict['parameters'] = [ par.dump_dict() for par in self.parameters ]
