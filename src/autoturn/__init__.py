"""Turn automation: queued, conditional, branchable action scripts for tabletop tokens."""

__version__ = "0.1.0"
