"""CRM persistence for captured leads."""

from .airtable import AirtableLeadStore, LeadSaveResult

__all__ = ["AirtableLeadStore", "LeadSaveResult"]
