"""
Guardian - Services
===================

Detectors, remediation primitives and the shared state they use.
"""
