"""
Core Engines

assessment – timed cognitive assessment and scoring
analysis   – clinical scan validation, inference and verdict parsing
risk       – shared risk tiers
"""
