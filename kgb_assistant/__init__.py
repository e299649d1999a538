"""
KGB Assistant - Source Package

Record keeping for periodic salary-step increases (KGB, Kenaikan Gaji
Berkala) of civil-service employees.

DESIGN PRINCIPLES:
1. The repository owns the data, storage only mirrors it
2. Fail early, fail visibly (imports are all-or-nothing)
3. No hidden state transitions (cycle rollover is a named function)
4. Every mutation is auditable
5. Storage backend is swappable
"""

__version__ = "1.0.0"
__author__ = "KGB Assistant Team"
