"""
Privacy (GDPR) schemas for LearnSpace.
"""

from pydantic import BaseModel


class ConsentUpdate(BaseModel):
    marketing_emails: bool = False
    analytics_tracking: bool = False
    third_party_sharing: bool = False
