"""
Step Scientists Test Suite
==========================

Test Organization
-----------------
- tests/unit/          : Fast tests of pure rules and domain models (no I/O)
- tests/integration/   : Service tests against an in-memory aiosqlite database

Testing Philosophy
------------------
- Use pytest markers (unit, domain, integration) to select tests
- Follow AAA pattern: Arrange, Act, Assert
"""
