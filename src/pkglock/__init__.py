"""
pkglock - expand package specs into a deterministic lock file and a
content-addressed store of layered Dockerfiles.
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
