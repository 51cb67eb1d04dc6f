"""
Podomus backend (podiatry clinic website).

Layout:
- config.py         : settings read from environment / .env
- logging_config.py : structlog setup
- db.py             : Database handle (SQLAlchemy engine and sessions)
- models.py         : ORM models and enums
- schemas.py        : pydantic inputs/outputs with field-level validation
- errors.py         : domain errors
- services.py       : handlers (patients, appointments, messages, services)
- api_main.py       : RPC router (FastAPI) under /trpc/<procedure>
- client.py         : typed client for the RPC router
- seed.py           : initial service catalog
- cli.py            : admin commands
"""
