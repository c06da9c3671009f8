"""An interactive command shell with pipes, redirections and variable expansion."""

__version__ = "0.1.0"