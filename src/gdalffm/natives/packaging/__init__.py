"""
The `packaging` sub-package contains the modules that turn a staged native
resource tree into distributable bundle archives.

This includes:
- Assembling full and swiss (reduced PROJ data) archives per classifier.
- Validating that a staged PROJ data directory satisfies the swiss subset.
- Orchestrating both across all classifiers and reading archives back.
"""
