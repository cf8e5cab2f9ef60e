"""zmpack.

Package a project directory into a timestamped zip archive, driven by a
``zmpack.json`` file that lists shell actions and the files to ship.
"""

__version__ = "1.0.0"
