"""Built-in plugins shipped with kbcheck."""
