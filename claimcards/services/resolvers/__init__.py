"""
Resolver implementations: linked refs -> SourceDetails.
"""

from claimcards.services.resolvers.scholarly_resolver import ScholarlyResolver
from claimcards.services.resolvers.static_resolver import StaticResolver

__all__ = ["ScholarlyResolver", "StaticResolver"]
