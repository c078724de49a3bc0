"""Region classification and policy-group synthesis."""

from clashforge.groups.models import Endpoint, GroupKind, PolicyGroup, RegionDescriptor
from clashforge.groups.regions import DEFAULT_REGIONS, EXTENDED_REGIONS, RegionTable
from clashforge.groups.synthesizer import synthesize

__all__ = [
    "DEFAULT_REGIONS",
    "EXTENDED_REGIONS",
    "Endpoint",
    "GroupKind",
    "PolicyGroup",
    "RegionDescriptor",
    "RegionTable",
    "synthesize",
]
