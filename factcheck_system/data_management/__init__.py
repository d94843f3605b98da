"""Data management package for the fact verification system.

Provides storage and schemas for:
- Facts (Fact, FactEntry) - verification input and stored records
- Articles - content scanned for facts
- Verification results (WebVerificationResult, SourceCheck)

Storage adapters:
- FactStore: Fact registration, due queue and verification history
"""

from factcheck_system.data_management.fact_store import FactStore

__all__ = ["FactStore"]
