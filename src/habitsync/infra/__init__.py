"""Infrastructure adapters: persistence, HTTP and timers."""
