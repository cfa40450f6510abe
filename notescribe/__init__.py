"""
notescribe: rule-based structuring of transcribed nursing narrative.

Design intent:
- Turn dictated narrative into a reviewable, sectioned documentation draft.
- Keep every stage deterministic so drafts are reproducible and auditable.
"""
