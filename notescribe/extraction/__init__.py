"""
Field extraction boundary for notescribe.

Design intent:
- Pull discrete clinical facts out of transcribed nursing narrative.
- Represent missing data as absence, never as an exception.
"""
