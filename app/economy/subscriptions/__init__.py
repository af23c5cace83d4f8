from .errors import ProvisioningError
from .extension import compute_new_paid_until
from .panel_client import PanelClientState, ProvisioningPanelClient
from .provider import PanelSubscriptionProvider, SubscriptionProvider, build_subscription_provider

__all__ = [
    "PanelClientState",
    "PanelSubscriptionProvider",
    "ProvisioningError",
    "ProvisioningPanelClient",
    "SubscriptionProvider",
    "build_subscription_provider",
    "compute_new_paid_until",
]
