"""ChatKit starter: host page and session broker for an embedded ChatKit widget."""

__version__ = "0.1.0"
