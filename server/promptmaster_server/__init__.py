"""PromptMaster: prompt quality assessment and optimization."""

__version__ = "0.1.0"
