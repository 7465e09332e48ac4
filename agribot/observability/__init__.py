from agribot.observability.logging_utils import init_logging, log_event, summarize_text

__all__ = ["init_logging", "log_event", "summarize_text"]
