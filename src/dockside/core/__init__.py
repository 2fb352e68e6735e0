"""Core primitives: errors, logging, configuration, events and the async lazy cache."""
