"""
crddocs: documentation generator for composite resource CRDs

Derives full CustomResourceDefinitions from Crossplane
CompositeResourceDefinitions found in versioned git repositories, and
renders one markdown page per resource type together with example CRs and
annotation documentation.
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
