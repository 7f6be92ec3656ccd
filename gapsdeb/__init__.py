"""gapsdeb - Build Debian packages of i3-gaps from upstream git.

This package front-ends the Debian packaging toolchain: it clones the
upstream tree, reconciles the package version, applies local patches,
runs dpkg-buildpackage and offers to install the resulting packages.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
