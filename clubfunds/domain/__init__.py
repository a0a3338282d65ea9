"""Domain layer: entities, state machines, ledger rules and ports."""
