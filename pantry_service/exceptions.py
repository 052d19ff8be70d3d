"""
Custom exception classes for the recipe search and receipt ingestion pipelines
"""

from typing import Optional


class PantryServiceError(Exception):
    """Base exception for the pantry service"""
    pass


class SearchHTTPError(PantryServiceError):
    """Raised when the search provider answers with a non-2xx status"""
    def __init__(self, status: int):
        self.status = status
        super().__init__(f"Tavily API error: {status}")


class NoUsableResults(PantryServiceError):
    """Raised when a query returns nothing that survives domain filtering"""
    def __init__(self, raw_count: int, filtered_count: int):
        self.raw_count = raw_count
        self.filtered_count = filtered_count
        super().__init__(
            f"No usable results (raw: {raw_count}, after filtering: {filtered_count})"
        )


class ModelOutputError(PantryServiceError):
    """Raised when vision model output contains no parseable JSON object"""
    def __init__(self, model: str, reason: str):
        self.model = model
        super().__init__(f"{reason} for model {model}")


class GeminiNotConfiguredError(PantryServiceError):
    """Raised when receipt parsing is requested without GEMINI_API_KEY"""
    def __init__(self):
        super().__init__("Gemini client not initialized (set GEMINI_API_KEY)")


class ReceiptParsingError(PantryServiceError):
    """Raised when every vision model candidate has been tried without success"""
    def __init__(self, tried: list, last_error: Optional[BaseException] = None):
        self.tried = tried
        self.last_error = last_error
        message = f"All Gemini model candidates failed (tried: {', '.join(tried)})."
        if last_error is not None:
            message += f" Last error: {last_error}"
        super().__init__(message)


class FallbackExhausted(PantryServiceError):
    """Raised when an ordered fallback runs out of attempts or is aborted early"""
    def __init__(self, failures: list, aborted: bool = False):
        self.failures = failures
        self.aborted = aborted
        labels = ", ".join(failure.label for failure in failures) or "none"
        state = "aborted" if aborted else "exhausted"
        super().__init__(f"Fallback {state} after {len(failures)} attempt(s) (tried: {labels})")
