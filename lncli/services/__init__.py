"""Core acquisition engine.

- **extractor** -- markup -> PageState / latest chapter / SearchResult
- **navigator** -- chapter-URL arithmetic and boundary checks
- **update_checker** -- concurrent "new chapters?" check over tracked titles
- **library_store** -- persisted tracked / recently-read collections
- **reader_service** -- facade orchestrating all of the above
"""
