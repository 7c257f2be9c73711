"""Admission pipeline components."""

from .checker import AdmissionChecker
from .normalizer import NameNormalizer
from .policy import PolicyResolver
from .registrar import RequestRegistrar
from .service import ArchivePVService, parse_plain_request, parse_structured_item

__all__ = [
    "AdmissionChecker",
    "ArchivePVService",
    "NameNormalizer",
    "PolicyResolver",
    "RequestRegistrar",
    "parse_plain_request",
    "parse_structured_item",
]
