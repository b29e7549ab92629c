"""partition-dedup configuration: logging, settings and exceptions."""
