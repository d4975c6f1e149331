"""
API orchestration boundary for matchday.

Design intent:
- Expose thin, typed endpoints for game drafts and lifecycle transitions.
- Keep request validation explicit and failure modes predictable.
- Leave state rules to the record store instead of embedding them in routers.
"""
