"""Fixed constants of the answer and search contracts. Not configurable."""

SIMILARITY_THRESHOLD = 0.5
DEFAULT_SEARCH_LIMIT = 3
MAX_ANSWER_ATTEMPTS = 3

SEARCH_TOOL_NAME = "search_similar_questions"

# User-visible terminal messages
NOT_A_QUESTION_MESSAGE = "No question found"
NO_ANSWER_PREFIX = "I don't know"
NO_RESULTS_MESSAGE = "I couldn't find any relevant information for your question."
EXHAUSTED_MESSAGE = "I couldn't find a relevant answer to your question after multiple attempts."
MODEL_UNAVAILABLE_MESSAGE = "I couldn't process your question. Please try again."
UNEXPECTED_ERROR_MESSAGE = (
    "I encountered an error while trying to answer your question. Please try again later."
)

# Citation placeholders
MISSING_CONTENT = "No content available"
UNKNOWN_USER = "Unknown User"
