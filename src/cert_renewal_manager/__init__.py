"""cert-renewal-manager: manual renewal of cert-manager Certificates."""

from cert_renewal_manager.__version__ import __version__

__all__ = ["__version__"]
