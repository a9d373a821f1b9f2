"""Channel summarization: message enrichment, summary composition and orchestration."""

from .enrichment import EmptyResult, EnrichedMessage, MessageEnricher
from .summarizer import LLMProtocol, SummaryComposer, insert_mentions, render_transcript
from .service import TldrReport, TldrService

__all__ = [
    "EmptyResult",
    "EnrichedMessage",
    "MessageEnricher",
    "LLMProtocol",
    "SummaryComposer",
    "insert_mentions",
    "render_transcript",
    "TldrReport",
    "TldrService",
]
