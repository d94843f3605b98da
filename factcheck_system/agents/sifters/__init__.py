"""Sifters turn article content into checked facts.

- extract_facts: Article text -> ExtractedFact objects
- WebVerifier: Fact -> WebVerificationResult
"""

from factcheck_system.agents.sifters.fact_extractor import extract_facts
from factcheck_system.agents.sifters.verification.web_verifier import WebVerifier

__all__ = ["WebVerifier", "extract_facts"]
