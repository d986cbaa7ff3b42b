"""Sphinx configuration for the seamap API reference."""

import sys
from pathlib import Path

# Modules are documented as src.seamap.*, so the repository root goes on the path
sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

project = "seamap"
author = "seamap contributors"
release = "1.0.0"

extensions = [
    "myst_parser",
    "sphinx.ext.autodoc",
    "sphinx.ext.autosummary",
    "sphinx.ext.napoleon",
]

source_suffix = {".md": "markdown"}
root_doc = "index"

# index.md lists the modules; autosummary writes one page per module into api/
autosummary_generate = True
autodoc_member_order = "bysource"
autodoc_typehints = "description"

# Docstrings use Google-style Args/Returns/Raises sections
napoleon_google_docstring = True
napoleon_numpy_docstring = False

html_theme = "sphinx_rtd_theme"
html_title = "seamap"
