from .common import CamelModel


class LoyaltyStatus(CamelModel):
    """Situação do cliente no programa de fidelidade (pronta para exibição)."""
    paid_wash_count: int
    redemption_count: int
    washes_since_last_reward: int
    washes_remaining: int
    goal: int
    progress: float
    has_reward_available: bool
    formula: str # "preserved" ou "corrected"
    wash_service_name: str
    reward_service_name: str
    message: str
