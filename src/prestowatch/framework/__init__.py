"""Cross-cutting framework pieces: logging and alert delivery."""
