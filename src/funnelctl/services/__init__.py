"""Service layer: history, persistence, reentrancy guard, and the session controller."""
