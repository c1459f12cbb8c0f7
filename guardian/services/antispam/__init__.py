"""
Guardian - Anti-Spam Package
============================

Similarity-based message spam detection.
"""

from guardian.services.antispam.detectors import similarity
from guardian.services.antispam.service import SimilaritySpamService

__all__ = ["SimilaritySpamService", "similarity"]
