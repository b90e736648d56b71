"""Error kinds surfaced by the generation cycle.

Every failure of an external call or of user input is converted into one of
these at the orchestrator boundary. Each kind carries the short message shown
to the user; the underlying cause is kept on ``__cause__`` for logging only.
"""


class RecipeGeneratorError(Exception):
    """Base exception for Smart Recipe Generator."""

    user_message = "Something went wrong. Please try again."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.user_message)
        self.user_message = message or self.user_message


class ImageIdentificationFailed(RecipeGeneratorError):
    """Raised when the photo could not be turned into an ingredient list."""

    user_message = "Failed to identify ingredients. Please try again or enter them manually."


class ValidationFailed(RecipeGeneratorError):
    """Raised when user input is insufficient; no external call is made."""

    user_message = "Please provide ingredients by uploading an image or typing them in."


class GenerationFailed(RecipeGeneratorError):
    """Raised when recipe generation or parsing failed after the fallback."""

    user_message = "Could not generate recipes. The model might be busy. Please try again."


class StorageReadFailed(RecipeGeneratorError):
    """Raised when persisted data is malformed. Logged, never shown to the user."""

    user_message = "Saved recipe data could not be read."


class CycleInProgress(RecipeGeneratorError):
    """Raised when a cycle is triggered while another one is still running."""

    user_message = "A request is already in progress. Please wait for it to finish."
