"""Error taxonomy for token operations.

Every error is an expected outcome of policy enforcement. Services raise
them unchanged and the API layer maps ``code`` to a response.
"""

from typing import Optional


class TokenError(Exception):
    """Base class for all token ledger errors."""

    code = "token_error"


class InvalidAmount(TokenError):
    """Raised for zero or negative transfer amounts."""

    code = "invalid_amount"

    def __init__(self, amount: int):
        self.amount = amount
        super().__init__(f"Transfer amount must be positive, got {amount}")


class InvalidAddress(TokenError):
    """Raised when an address is empty."""

    code = "invalid_address"

    def __init__(self, address: Optional[str]):
        self.address = address
        super().__init__(f"Invalid address: {address!r}")


class InsufficientBalance(TokenError):
    """Raised when a debit exceeds the account balance."""

    code = "insufficient_balance"

    def __init__(self, address: str, balance: int, amount: int):
        self.address = address
        self.balance = balance
        self.amount = amount
        super().__init__(f"Insufficient balance: {address} has {balance}, needs {amount}")


class Overflow(TokenError):
    """Raised when a credit would exceed the representable maximum."""

    code = "overflow"

    def __init__(self, address: str, balance: int, amount: int):
        self.address = address
        self.balance = balance
        self.amount = amount
        super().__init__(f"Credit of {amount} to {address} overflows balance {balance}")


class TradeAmountExceeded(TokenError):
    """Raised when a single transfer is above the daily maximum amount."""

    code = "trade_amount_exceeded"

    def __init__(self, amount: int, max_amount: int):
        self.amount = amount
        self.max_amount = max_amount
        super().__init__(f"Trade amount {amount} exceeds maximum {max_amount}")


class TradeLimitExceeded(TokenError):
    """Raised when a sender has used up its transfers for the current window."""

    code = "trade_limit_exceeded"

    def __init__(self, address: str, trade_count: int, limit: int, window_start: int):
        self.address = address
        self.trade_count = trade_count
        self.limit = limit
        self.window_start = window_start
        super().__init__(
            f"Daily trade limit exceeded: {address} made {trade_count} of {limit} "
            f"trades in window starting at {window_start}"
        )


class Unauthorized(TokenError):
    """Raised when a non-owner calls an administration operation."""

    code = "unauthorized"

    def __init__(self, caller: str, operation: str):
        self.caller = caller
        self.operation = operation
        super().__init__(f"Only owner can call this function ({operation}, caller {caller})")


class InvalidRate(TokenError):
    """Raised when a tax rate falls outside [0, 10000] basis points."""

    code = "invalid_rate"

    def __init__(self, bps: int):
        self.bps = bps
        super().__init__(f"Tax rate must be between 0 and 10000 bps, got {bps}")


class InvalidLimit(TokenError):
    """Raised when trade limits are not positive."""

    code = "invalid_limit"

    def __init__(self, max_amount: int, max_count: int):
        self.max_amount = max_amount
        self.max_count = max_count
        super().__init__(
            f"Trade limits must be positive, got amount={max_amount} count={max_count}"
        )


class AlreadyDeployed(TokenError):
    """Raised when the token is deployed a second time."""

    code = "already_deployed"

    def __init__(self) -> None:
        super().__init__("Token is already deployed")


class NotDeployed(TokenError):
    """Raised when the ledger is used before the token is deployed."""

    code = "not_deployed"

    def __init__(self) -> None:
        super().__init__("Token has not been deployed")
