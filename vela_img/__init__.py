"""Vela img plugin - build and publish container images with img.

This package translates plugin configuration into invocations of the
`img` executable and runs them in order: version, registry login, build.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
