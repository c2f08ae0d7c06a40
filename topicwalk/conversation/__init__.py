# conversation - answer history and citation extraction
from .answer_chain import AnswerChain, ContextInjection
from .citations import parse_citations

__all__ = ["AnswerChain", "ContextInjection", "parse_citations"]
