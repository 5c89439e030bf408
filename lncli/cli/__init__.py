"""Command-line front end for lncli.

- ``python -m lncli.cli`` -- read chapters, search, track titles, and
  check tracked titles for new chapters (see ``lncli/cli/reader.py``).
"""
