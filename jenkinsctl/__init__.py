"""
jenkinsctl - convergencia declarativa de hosts Jenkins sobre el motor converge.
"""

__version__ = "1.0.0"
