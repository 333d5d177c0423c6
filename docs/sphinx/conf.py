# Copyright 2026 Specbind Contributors
# SPDX-License-Identifier: Apache-2.0

"""Sphinx configuration for the specbind documentation."""

project = "specbind"
author = "Specbind Contributors"
release = "0.1.0"

extensions: list[str] = ["sphinx.ext.autodoc", "sphinx.ext.napoleon"]

html_theme = "alabaster"
