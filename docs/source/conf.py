# Configuration file for the Sphinx documentation builder.
#
# For the full list of built-in configuration values, see the documentation:
# https://www.sphinx-doc.org/en/master/usage/configuration.html

# -- Project information -----------------------------------------------------
import os
import sys

project = "SIRBench"
author = "SIRBench developers"
release = "0.1.0"

# -- General configuration ---------------------------------------------------

sys.path.insert(0, os.path.abspath("../../src/"))

extensions = [
    "sphinx.ext.duration",
    "sphinx.ext.autodoc",
    "sphinx.ext.autosummary",
    "sphinx.ext.intersphinx",
    "sphinx.ext.napoleon",
]
autosummary_generate = True
intersphinx_mapping = {
    "pydantic": ("https://docs.pydantic.dev/latest", None),
    "numpyro": ("https://num.pyro.ai/en/stable", None),
    "jax": ("https://docs.jax.dev/en/latest", None),
}

templates_path = ["_templates"]
exclude_patterns = []


# -- Options for HTML output -------------------------------------------------

html_theme = "sphinx_book_theme"
html_theme_options = {
    "show_navbar_depth": 2,
}
