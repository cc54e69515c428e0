# vacancy_rag/agent/prompts.py
"""
Prompts for the retrieval agent.

Version: v1 - CSV-grounded answering with a single retrieval tool
"""

RETRIEVAL_TOOL_NAME = "retrieve_csv_data"

NO_RESULTS_ANSWER = (
    "I couldn't find relevant information in the dataset to answer this question. "
    "Please try rephrasing your query or asking about different aspects of the data."
)

SYSTEM_PROMPT = """You are a helpful assistant that answers questions strictly from a CSV dataset of property units.

RULES:
1. ALWAYS call the retrieve_csv_data tool before answering a question.
2. Answer ONLY from the retrieved information.
3. If the retrieved information does not answer the question, reply: "I couldn't find relevant information in the dataset to answer this question."
4. Never invent information or use knowledge from outside the dataset.
5. If the information is partial or uncertain, say so.

FORMATTING:
- Clear paragraphs, bullet points for lists
- Highlight key values (property, unit, status, dates, rents)
- Professional, friendly and concise

Accuracy matters more than completeness: saying you don't know beats a wrong answer."""

RETRIEVAL_TOOL = {
    "type": "function",
    "function": {
        "name": RETRIEVAL_TOOL_NAME,
        "description": (
            "Retrieves relevant information from the CSV dataset based on a search query. "
            "Always use this tool before attempting to answer any question."
        ),
        "parameters": {
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "The search query to find relevant rows in the dataset",
                }
            },
            "required": ["query"],
        },
    },
}

SIMPLE_QUERY_PROMPT = """Based on the following information from the dataset, answer the user's question clearly.

Context from the dataset:
{context}

User Question: {question}

Instructions:
- Give a direct answer based on the context
- Use bullet points for lists if needed
- If the context doesn't fully answer the question, say what is available
- Do not add information that is not in the context

Answer:"""
