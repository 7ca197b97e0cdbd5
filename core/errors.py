"""Exception types shared across the pipeline, services and API layers."""


class GenerationFailed(RuntimeError):
    """The text-generation backend did not produce a usable completion.

    Raised by generation providers (network, auth, rate-limit, timeout,
    malformed response) and by ``LetterComposer`` for empty completions.
    ``EmotionPipeline`` catches it and returns the log without a letter.
    """


class StoreWriteError(RuntimeError):
    """An insert into the emotion store failed (duplicate id or database error)."""
