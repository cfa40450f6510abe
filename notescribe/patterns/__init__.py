"""
Pattern Library boundary for notescribe.

Design intent:
- Hold every recognition rule as declarative data, one table row per rule.
- Keep rules callable in isolation so they can be tested without the pipeline.
"""
