"""casesync: pushes applicant and case records into the external case-management system."""

__version__ = "0.1.0"
