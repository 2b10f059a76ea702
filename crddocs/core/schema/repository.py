"""Configuration model: source repositories and per-CRD metadata."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass(frozen=True)
class ReplacedBy:
    """Successor of a deprecated CRD."""
    full_name: str = ""
    short_name: str = ""


@dataclass(frozen=True)
class Deprecation:
    """Deprecation notice for a CRD.

    Attributes:
        info: Free-text explanation
        replaced_by: Successor CRD, if any
    """
    info: str = ""
    replaced_by: Optional[ReplacedBy] = None


@dataclass(frozen=True)
class CRDMetadata:
    """Documentation metadata configured for one CRD.

    A CRD without a metadata entry is not documented at all.

    Attributes:
        hidden: Skip this CRD when generating pages
        description: Text shown at the top of the page
        owner: Owner URLs (teams)
        topics: Topic tags
        provider: Providers the CRD applies to
        deprecation: Deprecation notice, if deprecated
    """
    hidden: bool = False
    description: str = ""
    owner: List[str] = field(default_factory=list)
    topics: List[str] = field(default_factory=list)
    provider: List[str] = field(default_factory=list)
    deprecation: Optional[Deprecation] = None


@dataclass(frozen=True)
class SourceRepository:
    """One configured repository to take CRDs from.

    Attributes:
        url: Repository URL, without the ``.git`` suffix
        organization: Owning organization; part of the clone path
        short_name: Repository short name; part of the clone path
        commit_reference: Branch or tag to check out
        metadata: Per-CRD metadata keyed by CRD name
    """
    url: str
    organization: str
    short_name: str
    commit_reference: str
    metadata: Dict[str, CRDMetadata] = field(default_factory=dict)


@dataclass(frozen=True)
class Configuration:
    """Parsed configuration file."""
    template_path: str
    source_repositories: List[SourceRepository] = field(default_factory=list)
