class TagNotesError(Exception):
    pass


class CorruptStateError(TagNotesError):
    """The stored notes blob could not be decoded into note records."""


class PersistenceFailure(TagNotesError):
    """Writing the notes blob to storage failed; in-memory state is kept."""
