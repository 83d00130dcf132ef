"""
SimplyMedi - Multilingual Medical Report Companion

Localization and API-integration layer for the SimplyMedi patient portal:
language selection, locale-aware formatting, and best-effort translation
and simplification of medical text through the SimplyMedi REST API.

IMPORTANT: Simplified text is informational. It must NEVER replace a doctor.
"""

__version__ = "1.0.0"
__author__ = "SimplyMedi Team"
