"""interviewer: LLM provider abstraction and chat orchestration for AI interviews."""

__version__ = "1.0.0"
