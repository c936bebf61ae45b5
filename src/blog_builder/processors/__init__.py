"""Processadores que agregam documentos renderizados."""

from .assembler import SiteAssembler

__all__ = ["SiteAssembler"]
