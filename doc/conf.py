# Configuration file for the Sphinx documentation builder.
#
# For the full list of built-in configuration values, see the documentation:
# https://www.sphinx-doc.org/en/master/usage/configuration.html

import os, sys
import sphinx_rtd_theme

sys.path.insert(0, os.path.abspath('..'))


# -- Project information -----------------------------------------------------
# https://www.sphinx-doc.org/en/master/usage/configuration.html#project-information

project = 'fastbin'
release = '0.1.0'

# -- General configuration ---------------------------------------------------
# https://www.sphinx-doc.org/en/master/usage/configuration.html#general-configuration

extensions = [
  'sphinx.ext.autodoc',
  'sphinx.ext.mathjax',
  'sphinx.ext.napoleon',
  'sphinx_rtd_theme',
]

templates_path = ['_templates']
exclude_patterns = [ '_build' ]

language = 'en'

# The master toctree document.
master_doc = 'index'

# The name of the Pygments (syntax highlighting) style to use.
pygments_style = 'default'


# -- Options for HTML output -------------------------------------------------
# https://www.sphinx-doc.org/en/master/usage/configuration.html#options-for-html-output

html_theme = 'sphinx_rtd_theme'

# Output file base name for HTML help builder.
htmlhelp_basename = 'fastbindoc'


# -- Options for LaTeX output ------------------------------------------------

latex_elements = {
    'preamble': r'''
    \usepackage{amsmath}
    \usepackage{bm}
    ''',
}

latex_documents = [
    (master_doc, 'fastbin.tex', 'fastbin Documentation', '', 'manual'),
]


# -- Extension configuration -------------------------------------------------

mathjax3_config = {
    'tex': {
      'packages' : {'[+]': ['bm'] },
        'macros': {
            'vt': [r'\boldsymbol{\theta}'],
            'vm': [r'\boldsymbol{\mu}'],
            'poi': [r'_{\text{POI}}'],
            'nps' : [r'_{\text{NPs}}'],
            'chan': [r'_{\text{channels}}'],
            'fine': [r'_{\text{fine}}'],
            }
        }
}
