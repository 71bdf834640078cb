# Sphinx configuration for the sec-agent console API docs.
# Build with: sphinx-build -b html docs docs/_build/html

import os
import sys

sys.path.insert(0, os.path.abspath("../src"))

project = "sec-agent console"
author = "sec-agent contributors"
copyright = "2025, sec-agent contributors"
release = "0.1.0"

extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.napoleon",
    "sphinx.ext.intersphinx",
    "sphinx_autodoc_typehints",
]

root_doc = "index"
exclude_patterns = ["_build"]
html_theme = "sphinx_rtd_theme"

autodoc_member_order = "bysource"
autodoc_default_options = {"members": True, "show-inheritance": True}

napoleon_numpy_docstring = False

intersphinx_mapping = {
    "python": ("https://docs.python.org/3", None),
    "pydantic": ("https://docs.pydantic.dev/latest", None),
    "rich": ("https://rich.readthedocs.io/en/stable", None),
}
