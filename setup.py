from setuptools import setup

setup(
  name             = 'fastbin',
  version          = '0.1.0',
  description      = 'Fisher-information driven bin merging for binned-likelihood template fits',
  packages         = [ 'fastbin' ],
  python_requires  = '>=3.8',
  install_requires = [ 'numpy>=1.19.5', 'scipy>=1.5.0', 'pandas>=1.1.0', 'PyYAML>=5.1' ],
  extras_require   = {
    'test' : [ 'pytest>=6.0' ],
    'doc'  : [ 'sphinx', 'sphinx-rtd-theme>=0.5.1' ],
  },
)
