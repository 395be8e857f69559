import numpy as np
import pytest

from fastbin import add_sym_in_place, invert_symmetric


def test_add_sym_in_place() :
  a = np.eye(2)
  b = np.array([[1., 2.], [2., 1.]])
  out = add_sym_in_place(a, b, -1)
  assert out is a
  assert np.array_equal(a, np.array([[0., -2.], [-2., 0.]]))


def test_add_sym_shape_mismatch() :
  with pytest.raises(ValueError) :
    add_sym_in_place(np.eye(2), np.eye(3))


def test_invert_positive_definite() :
  a = np.array([[4., 1.], [1., 3.]])
  inverse = invert_symmetric(a)
  assert np.allclose(inverse, np.linalg.inv(a))
  assert np.array_equal(inverse, inverse.T)


def test_invert_singular() :
  a = np.array([[1., 1.], [1., 1.]])
  assert invert_symmetric(a) is None
  assert np.allclose(invert_symmetric(a, rcond=1E-10), np.full((2, 2), 0.25))


def test_invert_degenerate_inputs() :
  assert invert_symmetric(np.zeros((2, 2))) is None
  assert invert_symmetric(np.array([[np.nan, 0.], [0., 1.]])) is None
  assert invert_symmetric(np.zeros((0, 0))) is None
