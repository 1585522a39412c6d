"""In-memory token ledger and LP-share staking pool with points-based reward accounting."""

__version__ = "0.1.0"
__all__ = ["env", "token", "errors", "storage", "distribution", "staking"]