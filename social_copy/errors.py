"""Error taxonomy for the copy pipeline.

Each component wraps the failures of its external collaborator in one of
these types. The API layer maps them to HTTP status codes:

- ValidationError -> 400
- everything else -> 500
"""


class CopyServiceError(Exception):
    """Base class for pipeline errors."""

    status_code = 500


class ValidationError(CopyServiceError):
    """A required request field is missing or blank."""

    status_code = 400


class ExtractionError(CopyServiceError):
    """The article page could not be fetched or has no usable title."""


class EmbeddingError(CopyServiceError):
    """The embedding call failed or returned something that is not a vector."""


class StoreWriteError(CopyServiceError):
    """Upsert into the vector store failed."""


class StoreQueryError(CopyServiceError):
    """Nearest-neighbor query against the vector store failed."""


class GenerationError(CopyServiceError):
    """The generative model call failed or timed out."""
