from typing import Optional

class GradeIngestionError(Exception):
    """Base class for every recoverable ingestion failure."""
    pass

# --- FETCH FAILURES ---

class FetchError(GradeIngestionError):
    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url

class FetchTimeout(FetchError):
    pass

class FetchHttpError(FetchError):
    def __init__(self, status: int, url: Optional[str] = None):
        super().__init__(f"HTTP {status}", url)
        self.status = status

class FetchNetworkError(FetchError):
    pass

class EmptyResponse(FetchError):
    """
    The server answered, but with a body too short to be a real page.
    Symptom of a soft-block or a maintenance page.
    """
    pass

# --- EXTRACTION FAILURES ---

class NoGradeTablesFound(GradeIngestionError):
    pass

class NoGroupsFound(GradeIngestionError):
    pass
