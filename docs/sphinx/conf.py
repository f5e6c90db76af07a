# Copyright 2026 AppMeta Contributors
# SPDX-License-Identifier: Apache-2.0

"""Sphinx configuration for AppMeta documentation.

The API reference is generated from the installed ``appmeta`` package.
"""

project = "AppMeta"
author = "AppMeta Contributors"
release = "0.1.0"

extensions: list[str] = ["sphinx.ext.autodoc", "sphinx.ext.napoleon"]

autodoc_member_order = "bysource"
napoleon_google_docstring = True
napoleon_numpy_docstring = False

html_theme = "alabaster"
