"""Sphinx configuration for the PaRC documentation.

Loads the package from the source tree and builds the API reference from the
Google-style docstrings.
"""

from __future__ import annotations

import importlib.util
import sys
import warnings
from datetime import date
from pathlib import Path
from typing import Final

SRC_PATH: Final[Path] = Path(__file__).resolve().parents[1] / "src"
PACKAGE_INIT: Final[Path] = SRC_PATH / "parc" / "__init__.py"

sys.path.insert(0, str(SRC_PATH))

parc_spec = importlib.util.spec_from_file_location("parc", PACKAGE_INIT)
if parc_spec is None or parc_spec.loader is None:
    raise ImportError(f"Unable to locate the parc package at {PACKAGE_INIT}")
parc = importlib.util.module_from_spec(parc_spec)
sys.modules["parc"] = parc
parc_spec.loader.exec_module(parc)

project = "PaRC"
author = "Pablo Antolin"
copyright = f"{date.today().year}, {author}"  # pylint: disable=redefined-builtin
version = release = parc.__version__


def _available(module: str) -> bool:
    if importlib.util.find_spec(module) is not None:
        return True
    warnings.warn(f"Sphinx module {module!r} not found.", stacklevel=1)
    return False


extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.autosummary",
    "sphinx.ext.intersphinx",
    "sphinx.ext.mathjax",
    "sphinx.ext.napoleon",
    "sphinx.ext.viewcode",
    "myst_parser",
]
if _available("sphinx_rtd_dark_mode"):
    extensions.append("sphinx_rtd_dark_mode")

intersphinx_mapping = {
    "python": ("https://docs.python.org/3", None),
    "numpy": ("https://numpy.org/doc/stable", None),
    "scipy": ("https://docs.scipy.org/doc/scipy/", None),
}

source_suffix = {".rst": "restructuredtext", ".md": "markdown"}
master_doc = "index"
templates_path = ["_templates"]
exclude_patterns: list[str] = ["_build"]

napoleon_google_docstring = True
napoleon_numpy_docstring = False
napoleon_attr_annotations = True

autosummary_generate = True
autodoc_typehints = "description"
autodoc_member_order = "bysource"

myst_enable_extensions = ["colon_fence", "dollarmath"]

html_theme = "sphinx_rtd_theme" if _available("sphinx_rtd_theme") else "alabaster"
html_static_path = ["_static"]
