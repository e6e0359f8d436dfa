"""
Business logic for survey collection and problem-trend analysis.
"""
