# vacancy_rag/cli/commands/ask.py
"""
Ask a question about the ingested data.

Usage:
    vacancy-rag ask "Which units at Oak Plaza are vacant?"
    vacancy-rag ask "..." --simple      # retrieve once, no tool loop
"""

from __future__ import annotations

from vacancy_rag.cli.context import CLIState, handle_errors, open_runtime, setup
from vacancy_rag.cli.ui import ui


def command(state: CLIState, question: str, simple: bool = False) -> None:
    setup(state)

    with handle_errors():
        runtime = open_runtime(state, track_jobs=False)
        try:
            agent = runtime.agent()
            answer = agent.simple_query(question) if simple else agent.run(question)
        finally:
            runtime.close()

    ui.markdown(answer.answer)
    if not answer.has_answer:
        ui.info("No grounded answer found in the dataset.")
