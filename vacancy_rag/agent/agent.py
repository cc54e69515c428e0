# vacancy_rag/agent/agent.py
"""
Single-tool retrieval agent.

The model gets one tool, retrieve_csv_data. The loop is:

    model -> tool calls? -> run retrieval -> model -> ... -> final answer

bounded by max_tool_rounds. Tool failures are handed back to the model
as a JSON result; they never escape the loop.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from vacancy_rag.agent.prompts import (
    NO_RESULTS_ANSWER,
    RETRIEVAL_TOOL,
    RETRIEVAL_TOOL_NAME,
    SIMPLE_QUERY_PROMPT,
    SYSTEM_PROMPT,
)
from vacancy_rag.llm.chat import ChatClient, ToolCall
from vacancy_rag.logging.logger import get_logger
from vacancy_rag.logging.tags import AGENT
from vacancy_rag.retrieval.retriever import Retriever
from vacancy_rag.uid.annotator import DEFAULT_UID_COLUMN

logger = get_logger(__name__)

_NO_ANSWER_MARKERS = ("no answer found", "couldn't find")


@dataclass
class AgentAnswer:
    answer: str
    raw_answer: str
    sources: List[Dict[str, Any]] = field(default_factory=list)
    context: Optional[str] = None
    has_answer: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict)


def _looks_answered(raw_answer: str) -> bool:
    lowered = raw_answer.lower()
    return not any(marker in lowered for marker in _NO_ANSWER_MARKERS)


def format_answer(
    raw_answer: str,
    sources: Sequence[Dict[str, Any]],
    has_tool_results: bool,
    uid_column: str = DEFAULT_UID_COLUMN,
) -> Tuple[str, List[Dict[str, Any]]]:
    """
    Add numbered citations to an answer.

    A "**Sources:**" section is appended unless the answer already
    mentions a source or reference.

    Returns:
        (formatted answer, citations)
    """
    if not has_tool_results:
        return NO_RESULTS_ANSWER, []

    formatted = raw_answer.strip()
    citations = [{"id": i, **source} for i, source in enumerate(sources, start=1)]

    lowered = formatted.lower()
    if citations and "source" not in lowered and "reference" not in lowered:
        lines = ["", "", "**Sources:**"]
        for citation in citations:
            line = f"- Document {citation['id']}"
            uid = (citation.get("metadata") or {}).get(uid_column)
            if uid:
                line += f" (UID {uid})"
            if citation.get("source"):
                line += f" from {citation['source']}"
            lines.append(line)
        formatted += "\n".join(lines) + "\n"

    return formatted, citations


class RetrievalAgent:
    """
    Answers questions from the stored CSV data.

    Usage:
        agent = RetrievalAgent(chat_client, retriever)
        answer = agent.run("Which units at S0020 are vacant?")
        print(answer.answer)
    """

    def __init__(
        self,
        chat_client: ChatClient,
        retriever: Retriever,
        max_tool_rounds: int = 3,
        uid_column: str = DEFAULT_UID_COLUMN,
    ):
        if max_tool_rounds < 1:
            raise ValueError(f"max_tool_rounds must be >= 1, got {max_tool_rounds}")
        self.chat_client = chat_client
        self.retriever = retriever
        self.max_tool_rounds = max_tool_rounds
        self.uid_column = uid_column

    def _run_tool(self, call: ToolCall, fallback_query: str) -> Dict[str, Any]:
        if call.name != RETRIEVAL_TOOL_NAME:
            return {"found": False, "error": f"Unknown tool: {call.name}"}

        try:
            arguments = json.loads(call.arguments or "{}")
        except json.JSONDecodeError:
            arguments = {}
        query = arguments.get("query") or fallback_query

        logger.info(f"{AGENT} Tool call {call.name} with query: {query!r}")

        try:
            result = self.retriever.retrieve_for_rag(query)
        except Exception as e:
            logger.error(f"{AGENT} Retrieval tool failed: {e}")
            return {
                "found": False,
                "error": "Error retrieving data from the dataset.",
                "message": str(e),
            }

        if not result.has_results:
            return {
                "found": False,
                "message": "No relevant information found in the dataset for this query.",
                "context": "",
                "sources": [],
            }

        return {
            "found": True,
            "context": result.context,
            "sources": [s.to_dict() for s in result.sources],
            "documentCount": len(result.documents),
        }

    def run(self, query: str) -> AgentAnswer:
        """Answer a question using the tool loop."""
        logger.info(f"{AGENT} Processing query: {query!r}")

        messages: List[Dict[str, Any]] = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": query},
        ]

        sources: List[Dict[str, Any]] = []
        context: Optional[str] = None
        has_tool_results = False
        raw_answer = ""

        for round_number in range(self.max_tool_rounds + 1):
            # Final round withholds the tool so the model has to answer
            tools = [RETRIEVAL_TOOL] if round_number < self.max_tool_rounds else None
            response = self.chat_client.chat(messages, tools=tools)

            if not response.tool_calls or tools is None:
                raw_answer = response.content
                break

            messages.append(response.to_message())
            for call in response.tool_calls:
                tool_result = self._run_tool(call, query)
                if tool_result.get("found"):
                    has_tool_results = True
                    sources = tool_result.get("sources") or sources
                    context = tool_result.get("context") or context
                messages.append(
                    {
                        "role": "tool",
                        "tool_call_id": call.id,
                        "content": json.dumps(tool_result, default=str),
                    }
                )

        formatted, citations = format_answer(
            raw_answer, sources, has_tool_results, self.uid_column
        )

        logger.info(
            f"{AGENT} Answer ready ({len(formatted)} chars, {len(citations)} sources)"
        )

        return AgentAnswer(
            answer=formatted,
            raw_answer=raw_answer,
            sources=citations,
            context=context,
            has_answer=has_tool_results and _looks_answered(raw_answer),
            metadata={
                "query": query,
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "source_count": len(citations),
            },
        )

    def simple_query(self, query: str) -> AgentAnswer:
        """Retrieve once, then answer with a single completion (no tools)."""
        retrieval = self.retriever.retrieve_for_rag(query)
        timestamp = datetime.now(timezone.utc).isoformat()

        if not retrieval.has_results:
            return AgentAnswer(
                answer=NO_RESULTS_ANSWER,
                raw_answer="No answer found in the dataset.",
                metadata={"query": query, "timestamp": timestamp, "source_count": 0},
            )

        prompt = SIMPLE_QUERY_PROMPT.format(context=retrieval.context, question=query)
        response = self.chat_client.chat([{"role": "user", "content": prompt}])
        raw_answer = response.content

        sources = [s.to_dict() for s in retrieval.sources]
        formatted, citations = format_answer(raw_answer, sources, True, self.uid_column)

        return AgentAnswer(
            answer=formatted,
            raw_answer=raw_answer,
            sources=citations,
            context=retrieval.context,
            has_answer=_looks_answered(raw_answer),
            metadata={
                "query": query,
                "timestamp": timestamp,
                "source_count": len(citations),
                "top_similarity": retrieval.documents[0].similarity,
            },
        )


__all__ = ["AgentAnswer", "RetrievalAgent", "format_answer"]
