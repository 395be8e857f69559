"""Module containing the common building blocks of fastbin:

  * :class:`Serializable`, the base class for all objects that can be
    loaded from / saved to markup files (JSON and YAML are supported).

  * :class:`ConfigurationError`, the exception raised when the inputs
    of a binning optimisation are inconsistent.
"""

import numpy as np
import math
import json, yaml
from abc import abstractmethod


# -------------------------------------------------------------------------
class ConfigurationError(ValueError) :
  """Exception raised for invalid or inconsistent optimisation inputs

  Raised before any merging is attempted, so that no partial result
  is ever produced from a bad configuration.
  """
  pass


# -------------------------------------------------------------------------
class Serializable :
  """An abstract base class for objects that load from / save to a markup filename

  The class implements

  * load() and save() methods with filename arguments,

  * load_markup() and dump_markup() with markup string arguments.

  Both sets are implemented in terms of the abstract methods load_dict() and
  fill_dict(), which operate on dictionaries and should be implemented
  in the derived classes.
  """

  def load(self, filename : str, flavor : str = None) -> 'Serializable' :
    """Load the object from a markup file

      Args:
        filename: name of the file to load from
        flavor  : input markup flavor (currently supported: 'json' [default], 'yaml')
      Returns:
        Serializable: self
    """
    if flavor is None : flavor = self.guess_flavor(filename, 'json')
    with open(filename, 'r') as fd :
      if flavor == 'json' :
        sdict = json.load(fd)
      elif flavor == 'yaml' :
        sdict = yaml.safe_load(fd)
      else :
        raise KeyError("Unknown markup flavor '%s',  so far only 'json' or 'yaml' are supported" % flavor)
    return self.load_dict(sdict)

  def save(self, filename : str, flavor : str = None, payload : dict = None) -> 'Serializable' :
    """Save the object to a markup file

      Args:
        filename: name of the file to save to
        flavor  : output markup flavor (currently supported: 'json' [default], 'yaml')
        payload : the data that should be saved (default: the object contents)

      Returns:
        Serializable: self
    """
    if flavor is None : flavor = self.guess_flavor(filename, 'json')
    if flavor not in [ 'json', 'yaml' ] :
      raise KeyError("Unknown markup flavor '%s',  so far only 'json' or 'yaml' are supported" % flavor)
    sdict = self.dump_dict() if payload is None else payload
    with open(filename, 'w') as fd :
      if flavor == 'json' :
        json.dump(sdict, fd, ensure_ascii=True, indent=3)
      else :
        yaml.dump(sdict, fd, sort_keys=False, default_flow_style=None, width=10000)
    return self

  @staticmethod
  def guess_flavor(filename : str, default : str) -> str :
    """Guess the markup flavor from a file name

      Args:
        filename: name of the file
        default : return value if the guessing is unsuccessful

      Returns:
        str: the markup flavor (currently 'json' or 'yaml')
    """
    if filename[-4:] == 'json' : return 'json'
    if filename[-4:] == 'yaml' or filename[-3:] == 'yml' : return 'yaml'
    return default

  def load_markup(self, data : str, flavor : str = 'json') -> 'Serializable' :
    """Load the object from a markup string

      Args:
        data  : markup data to load, in string format
        flavor: input markup flavor (currently supported: 'json' [default], 'yaml')

      Returns:
        Serializable: self
    """
    if flavor == 'json' :
      sdict = json.loads(data)
    elif flavor == 'yaml' :
      sdict = yaml.safe_load(data)
    else :
      raise KeyError("Unknown markup flavor '%s',  so far only 'json' or 'yaml' are supported" % flavor)
    return self.load_dict(sdict)

  def dump_markup(self, flavor : str = 'json') -> str :
    """Dumps the object as a markup string

      Args:
        flavor: output markup flavor (currently supported: 'json' [default], 'yaml')

      Returns:
        str: the markup string encoding the object contents
    """
    sdict = self.dump_dict()
    if flavor == 'json' : return json.dumps(sdict, ensure_ascii=True, indent=3)
    if flavor == 'yaml' : return yaml.dump(sdict, sort_keys=False, default_flow_style=None, width=10000)
    raise KeyError("Unknown markup flavor '%s',  so far only 'json' or 'yaml' are supported" % flavor)

  def dump_dict(self) -> dict :
    """Dumps the object as a dictionary of markup data

      Returns:
        dict: dictionary with the object contents
    """
    sdict = {}
    self.fill_dict(sdict)
    return sdict

  @classmethod
  def load_field(cls, key : str, dic : dict, default = None, types : list = None) :
    """Load information from a dictionary of markup data, using a provided key

      If the key is not present, `default` is returned instead. If the value
      type is not among the ones listed in `types`, a TypeError is raised.

      Args:
         key    : key to look up in the dictionary
         dic    : dictionary object in which to look up the key
         default: default value to return if `key` is absent in `dic` (default: None)
         types  : list of allowed return types (default: None, allows all types)

      Returns:
        (depends): the value indexed by `key` in `dic`, or `default` if not present.
    """
    if not key in dic : return default
    val = dic[key]
    if val is None : return val
    if types is None : types = []
    if not isinstance(types, list) : types = [ types ]
    if types == [ np.ndarray ] : types = [ np.ndarray, list ]
    if types != [] and not any([isinstance(val, t) for t in types]) :
      raise TypeError('Object at key %s in markup dictionary has type %s, not the expected %s' %
                      (key, val.__class__.__name__, '|'.join([t.__name__ for t in types])))
    if types == [ np.ndarray, list ] : val = np.array(val, dtype=float)
    return val

  @staticmethod
  def unnumpy(obj) :
    """Process numpy data to make it serializable

      numpy objects such as np.ndarray cannot be serialized to markup
      as-is and need to be converted (e.g. arrays to lists). This function
      performs this conversion recursively on arrays and dicts containing
      arrays.

      Args:
         obj : object to convert

      Returns:
        (depends): the same object in serializable form
    """
    if isinstance(obj, np.integer) : return int(obj)
    if isinstance(obj, np.floating) : return float(obj)
    if isinstance(obj, np.bool_) : return bool(obj)
    if isinstance(obj, np.ndarray) or isinstance(obj, list) :
      return [ Serializable.unnumpy(element) for element in obj ]
    if isinstance(obj, dict) :
      return { key : Serializable.unnumpy(value) for key, value in obj.items() }
    return obj

  @staticmethod
  def markup_float(value : float) :
    """Encode a float so that it survives both JSON and YAML

      Infinite and NaN values are not valid JSON, they are stored as strings.

      Args:
         value : the value to encode

      Returns:
        float or str: the encoded value
    """
    value = float(value)
    if math.isfinite(value) : return value
    return str(value)

  @staticmethod
  def float_from_markup(value) -> float :
    """Decode a float stored with :meth:`markup_float`

      Args:
         value : the stored value (number or string such as 'inf')

      Returns:
        float: the decoded value
    """
    return float(value)

  @abstractmethod
  def load_dict(self, sdict: dict) -> 'Serializable' :
    """Abstract method to load information from a dictionary of markup data

      Args:
        sdict: a dictionary containing markup data

      Returns:
        self
    """
    return self

  @abstractmethod
  def fill_dict(self, sdict : dict) :
    """Abstract method to save information to a dictionary of markup data

      Args:
         sdict: a dictionary containing markup data
    """
    pass
