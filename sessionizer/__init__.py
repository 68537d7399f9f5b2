"""sessionizer — jump between directory-scoped tmux sessions."""

__version__ = "0.1.0"
