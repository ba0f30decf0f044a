"""
Sphinx configuration file for probdist documentation.
"""

import os
import sys

# Make the package importable for autodoc without installing it.
sys.path.insert(0, os.path.abspath('..'))

# -- Project information -----------------------------------------------------

project = 'probdist'
copyright = '2024, probdist developers'
author = 'probdist developers'

# The full version, including alpha/beta/rc tags
release = '0.1.0'

# -- General configuration ---------------------------------------------------

extensions = [
    'sphinx.ext.napoleon',
    'sphinx.ext.autodoc',
    'sphinx.ext.autosummary',
    'sphinx.ext.viewcode',
    'sphinx.ext.mathjax',
    'sphinx.ext.doctest',
]

autosummary_generate = True
autodoc_member_order = 'bysource'

templates_path = ['_templates']

exclude_patterns = ['_build', 'Thumbs.db', '.DS_Store']

# Doctest examples assume numpy and the distribution classes are in scope.
doctest_global_setup = """
import numpy as np
from probdist.distributions.univariate import *
from probdist.distributions.multivariate import *
from probdist.distributions.mixtures import *
"""

# -- Options for HTML output -------------------------------------------------

html_theme = 'sphinx_rtd_theme'

html_static_path = ['_static']

html_theme_options = {
    'prev_next_buttons_location': 'bottom',
    'navigation_depth': 3,
}

# -- Napoleon settings -------------------------------------------------------

napoleon_google_docstring = False
napoleon_numpy_docstring = True
napoleon_use_param = True
napoleon_use_rtype = True
