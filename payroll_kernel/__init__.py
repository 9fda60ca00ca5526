"""
Payroll Kernel - local payroll record keeping

A single-user payroll ledger persisted in a local SQLite file:
- Employee records with unique matricules
- Monthly salary computation with approved-advance deduction
- Advance request lifecycle (pending -> approved/rejected -> repaid)
- Cumulative payment recording with derived status
- Receipt records for salaries and advances
"""

__version__ = "0.1.0"
