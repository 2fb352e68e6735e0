"""dockside command-line interface."""
