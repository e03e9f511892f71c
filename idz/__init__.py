"""Identity Disks: text chunks with JSON metadata and float32 embeddings in SQLite,
with cosine search, a curses explorer and the idz-cli command."""

__version__ = "0.1.0"