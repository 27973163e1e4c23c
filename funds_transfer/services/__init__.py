"""Services Layer — imperative shell around the pure transfer rules.

Invariants:
    - Services receive their collaborators through __init__ (no module singletons)
    - Storage methods take the scope's AsyncSession as their first argument

Design Decisions:
    - One class per component: AccountLedger, SqlTransferStore, TransferOrchestrator
"""
