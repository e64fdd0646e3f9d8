"""Game state updates that are broadcast to players."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import IntEnum
from typing import Optional


class GameStateType(IntEnum):
    """Kind of game state update."""

    MARKET_STATE_UPDATE = 0
    STOCK_DIVIDEND_STATE_UPDATE = 1
    OTP_VERIFIED_STATE_UPDATE = 2
    STOCK_BANKRUPT_STATE_UPDATE = 3
    USER_BLOCK_STATE_UPDATE = 4
    USER_REFERRED_CREDIT_UPDATE = 5
    DAILY_CHALLENGE_STATUS_UPDATE = 6
    USER_REWARD_CREDIT_UPDATE = 7

    def __str__(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    GameStateType.MARKET_STATE_UPDATE: "MarketStateUpdate",
    GameStateType.STOCK_DIVIDEND_STATE_UPDATE: "StockDividendStateUpdate",
    GameStateType.OTP_VERIFIED_STATE_UPDATE: "OtpVerifiedStateUpdate",
    GameStateType.STOCK_BANKRUPT_STATE_UPDATE: "StockBankruptStateUdpate",
    GameStateType.USER_BLOCK_STATE_UPDATE: "UserBlockStateUpdate",
    GameStateType.USER_REFERRED_CREDIT_UPDATE: "UserReferredCreditUpdate",
    GameStateType.DAILY_CHALLENGE_STATUS_UPDATE: "DailyChallengeStatusUpdate",
    GameStateType.USER_REWARD_CREDIT_UPDATE: "UserRewardCreditUpdate",
}

# Wire name of each update type, and the attribute holding its payload.
_WIRE = {
    GameStateType.MARKET_STATE_UPDATE: ("MarketStateUpdate", "market_state"),
    GameStateType.STOCK_DIVIDEND_STATE_UPDATE: (
        "StockDividendStateUpdate",
        "stock_dividend_state",
    ),
    GameStateType.OTP_VERIFIED_STATE_UPDATE: (
        "OtpVerifiedStateUpdate",
        "otp_verified_state",
    ),
    GameStateType.STOCK_BANKRUPT_STATE_UPDATE: (
        "StockBankruptStateUpdate",
        "stock_bankrupt_state",
    ),
    GameStateType.USER_BLOCK_STATE_UPDATE: ("UserBlockStateUpdate", "user_block_state"),
    GameStateType.USER_REFERRED_CREDIT_UPDATE: (
        "UserReferredCreditUpdate",
        "user_referred_credit",
    ),
    GameStateType.DAILY_CHALLENGE_STATUS_UPDATE: (
        "DailyChallengeStatusUpdate",
        "daily_challenge_state",
    ),
    GameStateType.USER_REWARD_CREDIT_UPDATE: (
        "UserRewardCreditUpdate",
        "user_reward_credit",
    ),
}


@dataclass
class MarketState:
    is_market_open: bool = False


@dataclass
class StockDividendState:
    """Whether a company gives dividends."""

    stock_id: int = 0
    gives_dividend: bool = False


@dataclass
class OtpVerifiedState:
    is_verified: bool = False


@dataclass
class StockBankruptState:
    stock_id: int = 0
    is_bankrupt: bool = False


@dataclass
class UserBlockState:
    is_blocked: bool = False
    cash: int = 0


@dataclass
class UserReferredCredit:
    cash: int = 0


@dataclass
class DailyChallengeStatus:
    is_daily_challenge_open: bool = False


@dataclass
class UserRewardCredit:
    cash: int = 0


@dataclass
class GameState:
    """A game state update addressed to one user, or to everyone when user_id is 0."""

    user_id: int = 0
    gs_type: GameStateType = GameStateType.MARKET_STATE_UPDATE
    market_state: Optional[MarketState] = None
    stock_dividend_state: Optional[StockDividendState] = None
    otp_verified_state: Optional[OtpVerifiedState] = None
    stock_bankrupt_state: Optional[StockBankruptState] = None
    user_block_state: Optional[UserBlockState] = None
    user_referred_credit: Optional[UserReferredCredit] = None
    daily_challenge_state: Optional[DailyChallengeStatus] = None
    user_reward_credit: Optional[UserRewardCredit] = None

    def to_dict(self) -> dict:
        """Serialisable view holding the user, the type and the matching payload.

        Raises ValueError if the payload for the update type is missing.
        """
        wire_name, attr = _WIRE[GameStateType(self.gs_type)]
        payload = getattr(self, attr)
        if payload is None:
            raise ValueError(f"{wire_name} requires {attr} to be set")
        return {"user_id": self.user_id, "type": wire_name, attr: asdict(payload)}