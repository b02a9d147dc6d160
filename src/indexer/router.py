"""Event Router — диспетчеризация событий по типу.

Чистый lookup-and-invoke: без буферизации и переупорядочивания, порядок задаёт лента.
Неизвестные типы событий игнорируются (forward-compatible no-op).

TrackedTokens — явное множество токенов, чьи TokenTrade индексируются
(регистрируется при TokenLaunched, откатывается вместе с хранилищем).
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, Optional

from src.core.domain import CrateToken, EventKind, TokenLaunched, TokenTrade
from src.core.logger import get_logger
from src.store import EntityStore

from .config import IndexerConfig
from .errors import ErrorKind, IndexerIntegrityError
from .handlers import handle_token_launched, handle_token_trade


logger = get_logger(__name__)

Handler = Callable[[EntityStore, Any, IndexerConfig], Any]


class TrackedTokens:
    """
    Множество отслеживаемых адресов токенов с блоком регистрации.

    Не зависит от EntityStore. add() помещает адрес в staging текущего события;
    commit()/abort() вызываются вместе с commit_event()/abort_event() хранилища,
    revert_to_block() — вместе с откатом хранилища.
    """

    def __init__(self):
        self._tracked: Dict[str, int] = {}
        self._staged: Dict[str, int] = {}

    @classmethod
    def from_store(cls, store: EntityStore) -> "TrackedTokens":
        """Восстановление множества из зафиксированных CrateToken (рестарт с персистентным store)."""
        tracked = cls()
        for token in store.iter_records(CrateToken):
            tracked._tracked[token.id] = token.block_number
        return tracked

    def add(self, address: str, block_number: int) -> None:
        address = address.lower()
        if address not in self._tracked:
            self._staged.setdefault(address, block_number)

    def commit(self) -> None:
        self._tracked.update(self._staged)
        self._staged.clear()

    def abort(self) -> None:
        self._staged.clear()

    def __contains__(self, address: object) -> bool:
        if not isinstance(address, str):
            return False
        address = address.lower()
        return address in self._tracked or address in self._staged

    def __len__(self) -> int:
        return len(self._tracked)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._tracked))

    def launched_at(self, address: str) -> Optional[int]:
        return self._tracked.get(address.lower())

    def revert_to_block(self, block_number: int) -> int:
        """Удалить токены, зарегистрированные в блоках >= block_number."""
        self._staged.clear()
        dropped = [a for a, b in self._tracked.items() if b >= block_number]
        for address in dropped:
            del self._tracked[address]
        return len(dropped)


@dataclass(frozen=True)
class DispatchResult:
    """Результат диспетчеризации одного события."""

    handled: bool
    kind: Optional[EventKind]
    output: Any = None


class EventRouter:
    """Маршрутизация событий к обработчикам по EventKind."""

    def __init__(self, config: Optional[IndexerConfig] = None, tracked: Optional[TrackedTokens] = None):
        self.config = config or IndexerConfig()
        self.tracked = tracked if tracked is not None else TrackedTokens()
        self._handlers: Dict[EventKind, Handler] = {
            EventKind.TOKEN_LAUNCHED: self._on_launch,
            EventKind.TOKEN_TRADE: self._on_trade,
        }

    def register(self, kind: EventKind, handler: Handler) -> None:
        """Заменить/добавить обработчик для типа события."""
        self._handlers[kind] = handler

    def dispatch(self, store: EntityStore, event: Any) -> DispatchResult:
        """
        Вызвать обработчик для типа события.

        Returns:
            DispatchResult(handled=False) для неизвестного типа

        Raises:
            IndexerIntegrityError: из обработчика, либо если TokenTrade пришёл
                от неотслеживаемого токена
        """
        kind = getattr(event, "kind", None)
        handler = self._handlers.get(kind) if isinstance(kind, EventKind) else None
        if handler is None:
            logger.debug("ignored unrecognized event kind %r", kind)
            return DispatchResult(handled=False, kind=None)
        return DispatchResult(handled=True, kind=kind, output=handler(store, event, self.config))

    # ------------------------------------------------------------------

    def _on_launch(self, store: EntityStore, event: TokenLaunched, config: IndexerConfig):
        token = handle_token_launched(store, event, config)
        if token is not None:
            self.tracked.add(token.id, event.block.block_number)
        return token

    def _on_trade(self, store: EntityStore, event: TokenTrade, config: IndexerConfig):
        if event.source not in self.tracked:
            raise IndexerIntegrityError(
                ErrorKind.MISSING_AGGREGATE_ROOT,
                f"trade from untracked token {event.source}",
                address=event.source,
                block_number=event.block.block_number,
                transaction_hash=event.block.transaction_hash,
            )
        return handle_token_trade(store, event, config)
