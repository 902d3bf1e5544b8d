"""서비스 패키지 — 비즈니스 로직 계층.

Service package — Business logic layer.
Contains all service classes that orchestrate business rules and transactions.
Services call repositories for DB operations and may call other services for cross-domain logic.
Services flush; route handlers commit once per request.
"""
