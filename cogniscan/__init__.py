"""
CogniScan - cognitive screening and brain-scan analysis service.
"""
__version__ = "1.0.0"
