"""
Lineup and match-report boundary for matchday.

Design intent:
- Hold soccer-specific rules (squad size, goalkeeper, report completeness).
- Rebuild editable lineup snapshots from the roster collection.
- Stay independent from the draft engine, which only sees guards and snapshots.
"""
