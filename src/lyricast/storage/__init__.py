"""Local persistence for the song library."""

from lyricast.storage.library import SongLibrary, StorageError, split_lyrics

__all__ = ["SongLibrary", "StorageError", "split_lyrics"]
