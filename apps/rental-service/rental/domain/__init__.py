"""Domain model: value objects, aggregates and events. No I/O lives here."""
