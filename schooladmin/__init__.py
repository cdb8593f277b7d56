"""School administration access control.

Granular module → page → action permissions with a coarse view/edit/full
tier layer, evaluated against named access levels and per-user overrides.
"""

__version__ = "0.3.0"
