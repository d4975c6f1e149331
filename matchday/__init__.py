"""
matchday draft engine package.

Design intent:
- Host the draft autosave and merge engine for long-lived match records.
- Keep soccer rules (lineup) apart from the generic draft machinery (drafts).
"""
