from campaign_dashboard.models.user import Account, AuthSession, User, VerificationToken
from campaign_dashboard.models.campaign import Campaign
from campaign_dashboard.models.influencer import Influencer
from campaign_dashboard.models.campaign_influencer import CampaignInfluencer

__all__ = [
    "User",
    "Account",
    "AuthSession",
    "VerificationToken",
    "Campaign",
    "Influencer",
    "CampaignInfluencer",
]
