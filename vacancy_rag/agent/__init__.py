# vacancy_rag/agent/__init__.py
"""Tool-using retrieval agent."""

from vacancy_rag.agent.agent import AgentAnswer, RetrievalAgent, format_answer

__all__ = ["AgentAnswer", "RetrievalAgent", "format_answer"]
