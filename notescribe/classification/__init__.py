"""
Format classification boundary for notescribe.

Design intent:
- Score a narrative against candidate documentation formats with inspectable rules.
- Return the winning format with its confidence and the indicators behind it.
"""
