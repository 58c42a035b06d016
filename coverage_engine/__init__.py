"""
Coverage Engine

Read-only analytical layer over a multi-platform content catalog that:
1. Enumerates the required (topic × language) target matrix per platform
2. Checks which targets have published content
3. Scores recruitment, awareness and founder coverage per country
4. Ranks countries by remediation priority and recommends next steps
"""

__version__ = "0.1.0"
