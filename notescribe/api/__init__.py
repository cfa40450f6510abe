"""
API orchestration boundary for notescribe.

Design intent:
- Expose thin, typed endpoints for classify/extract/structure/prompt flows.
- Keep request validation explicit and failure modes predictable.
- Orchestrate modules without embedding domain logic in routers.
"""
