"""nerovaagent - command-line front end for the local Nerova agent daemon."""

__version__ = "0.4.0"
