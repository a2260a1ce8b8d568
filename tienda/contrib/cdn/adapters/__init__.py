"""
CDN Adapters — Implementaciones de ImageCDN.

Backends disponibles:
- ImageKitCDN: Firma de uploads directos a ImageKit
"""

from .imagekit import ImageKitCDN

__all__ = ["ImageKitCDN"]
