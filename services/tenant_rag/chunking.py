"""Word-window chunking of extracted document text."""

DEFAULT_CHUNK_SIZE = 1000  # words per chunk
DEFAULT_CHUNK_OVERLAP = 200  # words shared by consecutive chunks


def chunk_text(text: str, chunk_size: int = DEFAULT_CHUNK_SIZE, overlap: int = DEFAULT_CHUNK_OVERLAP) -> list[str]:
    """Split a document's text into overlapping word windows.

    Words are whitespace-delimited and re-joined with single spaces. Each window
    starts `chunk_size - overlap` words after the previous one, until the start
    passes the final word. Trailing windows may be shorter than chunk_size.

    Args:
        text (str): The full document text.
        chunk_size (int): Words per chunk.
        overlap (int): Words repeated at the start of the following chunk.

    Returns:
        list[str]: Ordered, non-empty chunks. Empty for blank text.

    Raises:
        ValueError: If chunk_size is not positive, overlap is negative, or
            overlap >= chunk_size (the window would never advance).
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}.")
    if overlap < 0:
        raise ValueError(f"overlap must not be negative, got {overlap}.")
    step = chunk_size - overlap
    if step <= 0:
        raise ValueError(f"overlap ({overlap}) must be smaller than chunk_size ({chunk_size}).")

    words = text.split() if text else []
    chunks: list[str] = []
    for start in range(0, len(words), step):
        chunk = " ".join(words[start:start + chunk_size]).strip()
        if chunk:
            chunks.append(chunk)
    return chunks
