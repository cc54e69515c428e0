# vacancy_rag/logging/tags.py
"""
Logging subsystem tags.

Prefixed to log messages so output stays searchable per subsystem.
"""

INGEST = "[INGEST]"
UID = "[UID]"
EMBEDDING = "[EMBEDDING]"
UPSERT = "[UPSERT]"
JOBS = "[JOBS]"
VECTOR_DB = "[VECTOR_DB]"
STORAGE = "[STORAGE]"
RETRIEVER = "[RETRIEVER]"
AGENT = "[AGENT]"
CHAT = "[CHAT]"
POLLER = "[POLLER]"
CLI = "[CLI]"
