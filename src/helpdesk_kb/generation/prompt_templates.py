"""All prompt templates and model-facing schemas."""

from __future__ import annotations

from helpdesk_kb.config.constants import DEFAULT_SEARCH_LIMIT, SEARCH_TOOL_NAME

ANSWER_JSON_SYSTEM = """You are an AI assistant that answers questions from a help-desk knowledge base. You have access to a vector database of question-answer pairs mined from resolved help-desk threads. All of your answers must come directly from the search results; if you are even a little unsure, return a response with type: "no_answer".

IMPORTANT: First determine if the user's input is a question that requires information. If it's not a question (e.g., a greeting, statement, command, or other non-question), return a response with type: "not_question".

When responding, ALWAYS use one of the following JSON formats:

For normal answers:
{
  "type": "answer",
  "content": "Your detailed answer in markdown format.",
  "sources": ["https://example.slack.com/archives/...", "https://example.slack.com/archives/..."]
}

For questions you can't answer:
{
  "type": "no_answer",
  "reason": "Explanation of why you can't answer"
}

For non-questions:
{
  "type": "not_question"
}

For searching similar questions (this initiates a search). You MUST search for similar questions before answering:
{
  "type": "search_similar_questions",
  "query": "The search query",
  "limit": 3
}

Your answer content should use markdown formatting and MUST quote at least one source using a Markdown quote block. Search results include citationDetails with the permalink, content and username of each cited message. Use this content to give accurate answers and fuller quotes. ALWAYS include the username in your citation format.

Example answer:
{
  "type": "answer",
  "content": "No, you cannot use this project for commercial purposes.\\n\\n> this is not for commercial use\\n- [(source)](https://example.slack.com/archives/C0123456789/p1719238400253229) by Jane Doe",
  "sources": ["https://example.slack.com/archives/C0123456789/p1719238400253229"]
}"""

ANSWER_TOOLS_SYSTEM = f"""You are an AI assistant that answers questions from a help-desk knowledge base of question-answer pairs mined from resolved help-desk threads. You MUST call the `{SEARCH_TOOL_NAME}` tool before answering. All of your answers must come directly from the search results; if you are even a little unsure, decline.

First determine if the user's input is a question that requires information. If it is not (a greeting, statement, command, or other non-question), reply with exactly:
<not-question/>

To answer, reply with the answer in markdown followed by the permalinks you used, comma-separated:
<answer>Your answer. Quote at least one source as a Markdown quote block and include the author's username.</answer><sources>https://example.slack.com/archives/..., https://example.slack.com/archives/...</sources>

If you can't answer, reply with:
<no-answer>Explanation of why you can't answer</no-answer>

Search results include citationDetails with the permalink, content and username of each cited message. Use them for accurate answers and fuller quotes."""

INVALID_JSON_CORRECTION = "You didn't respond with valid JSON. Please try again."
WRONG_SHAPE_CORRECTION = "You didn't respond in the correct JSON format. Please try again."
TOOLS_FORMAT_CORRECTION = (
    "You didn't respond in the correct format. Please try again: call "
    f"`{SEARCH_TOOL_NAME}`, or reply with <answer>...</answer><sources>...</sources>, "
    "<no-answer>...</no-answer>, or <not-question/>."
)

SEARCH_TOOL = {
    "type": "function",
    "function": {
        "name": SEARCH_TOOL_NAME,
        "description": "Search the knowledge base for previously answered questions similar to the query.",
        "parameters": {
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "The search query, phrased as a question.",
                },
                "limit": {
                    "type": "integer",
                    "minimum": 1,
                    "description": f"Maximum number of results (default {DEFAULT_SEARCH_LIMIT}).",
                },
            },
            "required": ["query"],
        },
    },
}

THREAD_PARSER_SYSTEM = """You are a Slack help desk QA extractor. You are given a thread of messages from a Slack channel. You must extract the question-answer pairs from the thread.

# CORE RULES
1. FORMATTING:
   - Output ONLY valid JSON using this structure:
     {{ "qa_pairs": [ {{ "question": "...", "answer": "...", "citations": [...] }} ] }}
   - When no pairs found: {{ "qa_pairs": [] }}
   - citations are the message indexes (starting from 1) of the messages that contain the question and its answer, e.g. 3 for [#3 ...].

2. CONTENT PARAPHRASING:
   - Paraphrase both the question and the answer.
   - Strip ALL message metadata (user names, [#N] refs, timestamps)
   - Convert relative -> absolute time:
     * Current: {now}
     * Example: "yesterday" -> the absolute date
   - Generalize personal/circumstantial queries:
     * "Can I use React for my dating app?" -> "Can React be used for dating apps?"
     * Omit if not generalizable

3. QUALITY FILTERING:
   - MUST OMIT:
     > Unanswered/unclear questions
     > Personal logistics ("When's my meeting?")
     > Duplicates
   - MUST KEEP:
     > Policy clarifications
     > Technical solutions
     > Reusable knowledge

# OUTPUT EXAMPLE
Input messages:
  [#3 alice 2023-11-05 09:12:00 UTC]
  Is the API down right now?
  ---
  [#4 bob 2023-11-05 09:14:00 UTC]
  Yes, until 2023-11-06T12:00Z

Output:
{{
  "qa_pairs": [{{
    "question": "Is the API currently unavailable?",
    "answer": "The API is down until 2023-11-06 12:00 UTC",
    "citations": [3, 4]
  }}]
}}"""

QA_PAIRS_RESPONSE_FORMAT = {
    "type": "json_schema",
    "json_schema": {
        "name": "question-answer-pairs",
        "strict": True,
        "schema": {
            "type": "object",
            "properties": {
                "qa_pairs": {
                    "type": "array",
                    "description": "A list of question-answer pairs extracted from the Slack thread.",
                    "items": {
                        "type": "object",
                        "properties": {
                            "question": {
                                "type": "string",
                                "description": "The paraphrased text of the question",
                            },
                            "answer": {
                                "type": "string",
                                "description": "The paraphrased text of the answer",
                            },
                            "citations": {
                                "type": "array",
                                "description": "An array of message indexes (starting from 1) that contain the answer",
                                "items": {
                                    "type": "integer",
                                    "minimum": 1,
                                    "description": "A message index number corresponding to the input format (e.g., 1 for [#1 ...]).",
                                },
                            },
                        },
                        "required": ["question", "answer", "citations"],
                    },
                },
            },
            "required": ["qa_pairs"],
        },
    },
}

THREAD_BLOCK_SEPARATOR = "\n---\n"


def format_thread(messages: list) -> str:
    """Render a thread as numbered blocks: `[#i speaker timestamp]\\ntext`.

    Every message keeps its 1-based position so citation indexes line up
    with the thread even when a message has no timestamp.
    """
    blocks = []
    for i, msg in enumerate(messages, 1):
        speaker = msg.user or "Unknown"
        sent_at = msg.sent_at
        if sent_at is not None:
            header = f"[#{i} {speaker} {sent_at.strftime('%Y-%m-%d %H:%M:%S')} UTC]"
        else:
            header = f"[#{i} {speaker}]"
        blocks.append(f"{header}\n{msg.text or ''}")
    return THREAD_BLOCK_SEPARATOR.join(blocks)
