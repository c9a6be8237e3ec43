"""Weekly release-train automation for Azure DevOps style repositories."""

__version__ = "0.3.0"
