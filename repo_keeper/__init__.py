"""repo-keeper: multi-source repository backup and mirroring.

This package holds the OneDev connector: repository discovery across
configured sources and idempotent provisioning of mirror projects.
"""

__version__ = "0.1.0"
