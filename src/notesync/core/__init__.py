"""Core of the NoteSync client: schemas, services, state and errors."""
