"""cwtools_check

Core package namespace for the CWTools check runner.

Why this exists
---------------
The repository is organized as three top-level packages:

* ``cwtools_check`` (this package) owns the data contracts shared by every
  layer: domain types, the error taxonomy and filesystem helpers.
* ``tools`` holds adapters around external collaborators (the analyzer CLI,
  git, the GitHub check-run API).
* ``pipeline`` turns analyzer offenses into annotations, a verdict and
  publishable pages, and wires the collaborators together per CI host.

Keeping the contracts here lets ``tools`` and ``pipeline`` agree on shapes
without importing each other.
"""

from __future__ import annotations
