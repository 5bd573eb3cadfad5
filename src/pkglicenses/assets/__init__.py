# __init__.py
# SPDX-License-Identifier: MIT
"""Reference license texts loaded by :mod:`pkglicenses.core.templates`."""
