"""leadcatcher: messaging-channel front end for a lead-capture assistant."""

__version__ = "0.1.0"
