"""
Note drafting boundary for notescribe.

Design intent:
- Assemble editable draft sections from extracted fields.
- Gate drafts on minimum raw material before human review.
- Keep rendering deterministic and clinician-in-the-loop.
"""
