"""
EI Economic Region Lookup — Production Package
===============================================
Hexagonal (Ports & Adapters) architecture.

Layer map
─────────────────────────────────────────────────────
  config/       All tuneable settings (env / .env)
  domain/       Pure business objects (models, exceptions) — no I/O
  ports/        Abstract interfaces (Python Protocols)
  adapters/     Concrete implementations of each Port (Postgres, EI site…)
  services/     Cache-or-fetch orchestration; depends only on Ports
  interfaces/   Delivery layer: FastAPI, CLI, Streamlit UI
  tests/        Full test suite: unit / integration / e2e

Swapping any external dependency (store, scraped source):
  1. Write a new adapter in adapters/ implementing the relevant Port
  2. Change the single wiring line in services/container.py
"""
__version__ = "1.0.0"
