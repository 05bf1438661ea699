"""
pytest test suite for the Restaurant Payments API.

Test categories:
- Unit tests: pure helpers and the payment workflow over an in-memory store
- Integration tests: SQLAlchemy store and ORM models on in-memory SQLite
- API tests: FastAPI routes through httpx with the DB dependency overridden
"""
