"""Linear algebra helpers for symmetric matrices

  * :func:`add_sym_in_place` : in-place accumulation `A += scale*B`.

  * :func:`invert_symmetric` : symmetric inverse built from a singular
    value decomposition, returning `None` on failure instead of raising.
"""

import numpy as np
import scipy.linalg


# -------------------------------------------------------------------------
def add_sym_in_place(a : np.ndarray, b : np.ndarray, scale : float = 1) -> np.ndarray :
  """Accumulate a symmetric matrix into another one

    Args:
      a     : the target matrix, modified in place
      b     : the matrix to add
      scale : the scale factor applied to `b`
    Returns:
      the target matrix `a`
  """
  if a.shape != b.shape :
    raise ValueError('Cannot add matrix of shape %s to matrix of shape %s' % (str(b.shape), str(a.shape)))
  a += scale*b
  return a


# -------------------------------------------------------------------------
def invert_symmetric(a : np.ndarray, rcond : float = None) -> np.ndarray :
  """Invert a symmetric matrix using its singular value decomposition

    Two modes are available:

    * `rcond` is None (default): the matrix must be numerically
      invertible. If the smallest singular value is below machine
      precision times the largest one, the inversion is considered
      to have failed.

    * `rcond` is given: pseudo-inverse, in which singular values
      smaller than `rcond` times the largest one are dropped instead
      of being inverted.

    The output is symmetrized as 0.5*(M + M^T).

    Args:
      a     : the symmetric matrix to invert
      rcond : relative cutoff on the singular values (see above)
    Returns:
      the symmetric inverse, or `None` if the inversion failed
  """
  a = np.asarray(a, dtype=float)
  if a.ndim != 2 or a.shape[0] != a.shape[1] or a.shape[0] == 0 : return None
  try :
    u, s, vh = scipy.linalg.svd(a)
  except (np.linalg.LinAlgError, ValueError) :
    return None
  s_max = s[0]
  if not np.isfinite(s_max) or s_max <= 0 : return None
  if rcond is None :
    if s[-1] <= np.finfo(float).eps*s_max : return None
    s_inv = 1/s
  else :
    keep = s > rcond*s_max
    s_inv = np.divide(1, s, out=np.zeros_like(s), where=keep)
  inverse = (vh.T*s_inv).dot(u.T)
  return 0.5*(inverse + inverse.T)
