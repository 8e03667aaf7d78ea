from contextvars import ContextVar, Token
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from dealers.models import Dealer


_current_dealer: ContextVar[Optional["Dealer"]] = ContextVar(
    "current_dealer", default=None
)


def get_current_dealer() -> Optional["Dealer"]:
    return _current_dealer.get()


def set_current_dealer(dealer: Optional["Dealer"]) -> Token:
    return _current_dealer.set(dealer)


def reset_current_dealer(token: Token) -> None:
    _current_dealer.reset(token)
