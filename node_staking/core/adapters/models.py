from enum import StrEnum
from typing import Annotated

from pydantic import BaseModel, Field, PlainSerializer, model_validator

# Base-unit integer; serialized as a decimal string so JSON consumers never
# round it through a float.
WeiAmount = Annotated[
    int,
    Field(ge=0),
    PlainSerializer(lambda v: str(v), return_type=str, when_used="json"),
]


class StakePosition(BaseModel):
    service_id: str
    service_name: str
    staked_amount: WeiAmount = 0
    pending_rewards: WeiAmount = 0
    stake_token: str
    min_stake: WeiAmount = 0


class AutoClaimPreference(BaseModel):
    enabled: bool = False
    threshold: WeiAmount = 0
    interval_hours: int = Field(default=24, ge=1)


class StakingSummary(BaseModel):
    total_staked: WeiAmount = 0
    total_pending_rewards: WeiAmount = 0
    positions: list[StakePosition] = []
    can_unstake: bool = False
    # Cooldowns are not enforced by the contracts yet; always 0.
    unstake_cooldown_seconds: int = 0
    auto_claim_enabled: bool = False
    auto_claim_threshold: WeiAmount = 0
    auto_claim_interval: int = 24
    next_auto_claim_time: int | None = None

    @classmethod
    def from_positions(
        cls, positions: list[StakePosition], preference: AutoClaimPreference
    ) -> "StakingSummary":
        total_staked = sum(p.staked_amount for p in positions)
        return cls(
            total_staked=total_staked,
            total_pending_rewards=sum(p.pending_rewards for p in positions),
            positions=list(positions),
            can_unstake=total_staked > 0,
            auto_claim_enabled=preference.enabled,
            auto_claim_threshold=preference.threshold,
            auto_claim_interval=preference.interval_hours,
        )


class TransactionOutcome(BaseModel):
    success: bool
    transaction_id: str | None = None
    resulting_amount: WeiAmount = 0
    error: str | None = None

    @model_validator(mode="after")
    def _check_shape(self) -> "TransactionOutcome":
        if self.success and (not self.transaction_id or self.error is not None):
            raise ValueError("successful outcome needs a transaction id and no error")
        if not self.success and (self.transaction_id is not None or not self.error):
            raise ValueError("failed outcome needs an error and no transaction id")
        return self

    @classmethod
    def succeeded(cls, transaction_id: str, resulting_amount: int = 0):
        return cls(
            success=True,
            transaction_id=transaction_id,
            resulting_amount=resulting_amount,
        )

    @classmethod
    def failed(cls, error: str):
        return cls(success=False, error=error or "unknown error")


class TransactionStatus(StrEnum):
    SUBMITTED = "SUBMITTED"
    CONFIRMED = "CONFIRMED"
    FINALIZED = "FINALIZED"
    REVERTED = "REVERTED"


class TrackedTransaction(BaseModel):
    transaction_id: str
    status: TransactionStatus
    block_number: int | None = None
    confirmations: int = 0
    gas_used: int | None = None
