import asyncio
import contextlib
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Awaitable, Callable, List, Optional, Union

from .state_machine import PaymentStateMachine
from ..interfaces import StatusSourceInterface
from ..models.transaction import PaymentStatus, StatusSnapshot
from ..utilities import constants
from ..utilities.helpers import utcnow
from ..utilities.logging_config import logger


@dataclass(frozen=True)
class StatusChecked:
    """Resultado de uma consulta de status (sucesso ou falha engolida)."""
    snapshot: Optional[StatusSnapshot] = None
    error: Optional[Exception] = None


@dataclass(frozen=True)
class ClockTick:
    """Tick do contador regressivo, que também verifica a expiração."""
    now: datetime


PollerEvent = Union[StatusChecked, ClockTick]


class StatusPoller:
    """
    Acompanha uma transação em WAITING_PAYMENT com dois timers independentes:
    consulta de status a cada ``poll_interval`` e contador a cada
    ``tick_interval``. Ambos alimentam uma única fila consumida em ordem de
    chegada pela máquina de estados.

    Todas as tarefas são canceladas ao atingir um estado final, em ``stop()``
    e na saída do ``async with``. Falhas de consulta são registradas em
    ``errors`` e nunca propagadas; a próxima consulta tenta de novo.
    """

    def __init__(
        self,
        machine: PaymentStateMachine,
        source: StatusSourceInterface,
        poll_interval: float = constants.STATUS_POLL_INTERVAL,
        tick_interval: float = constants.COUNTDOWN_INTERVAL,
        clock: Callable[[], datetime] = utcnow,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        on_tick: Optional[Callable[[Optional[timedelta]], None]] = None,
    ):
        self.machine = machine
        self.source = source
        self.poll_interval = poll_interval
        self.tick_interval = tick_interval
        self._clock = clock
        self._sleep = sleep
        self._on_tick = on_tick

        self._queue: Optional[asyncio.Queue] = None
        self._consumer: Optional[asyncio.Task] = None
        self._producers: List[asyncio.Task] = []
        self._in_flight = False
        self._terminal = asyncio.Event()

        self.errors: List[Exception] = []
        self.time_left: Optional[timedelta] = None

    @property
    def running(self) -> bool:
        return self._consumer is not None and not self._consumer.done()

    # ========== CICLO DE VIDA ==========

    async def start(self) -> bool:
        """
        Inicia os timers. Só faz sentido em WAITING_PAYMENT; em outro estado não
        inicia nada e retorna False.
        """
        if self.running:
            return True
        if self.machine.state is not PaymentStatus.WAITING_PAYMENT:
            if self.machine.is_terminal:
                self._terminal.set()
            return False

        self._queue = asyncio.Queue()
        self._consumer = asyncio.create_task(self._consume())
        self._producers = [
            asyncio.create_task(self._poll_loop()),
            asyncio.create_task(self._tick_loop()),
        ]
        logger.info(
            f"▶️ Acompanhando pagamento {self._transaction_id}: "
            f"consulta a cada {self.poll_interval}s, contador a cada {self.tick_interval}s"
        )
        # contador atualizado imediatamente, sem esperar o primeiro intervalo
        self.tick()
        return True

    async def stop(self) -> None:
        """Cancela os timers e o consumidor; seguro para chamar mais de uma vez."""
        tasks = [t for t in (*self._producers, self._consumer) if t is not None]
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        # verificações manuais pendentes são liberadas sem aplicar o resultado
        if self._queue is not None:
            self._drain(self._queue)
        self._producers = []
        self._consumer = None
        self._queue = None

    async def __aenter__(self) -> "StatusPoller":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    async def wait_until_terminal(self, timeout: Optional[float] = None) -> PaymentStatus:
        await asyncio.wait_for(self._terminal.wait(), timeout)
        return self.machine.state

    # ========== OPERAÇÕES ==========

    async def poll_once(self) -> bool:
        """
        Uma consulta periódica. Pulada (retorna False) se outra ainda estiver em
        andamento ou se o estado já for final.
        """
        if self._in_flight:
            logger.debug(f"⏭️ Consulta de {self._transaction_id} ainda em andamento, tick pulado")
            return False
        event = await self._fetch()
        if event is None:
            return False
        self._submit(event)
        return True

    async def check_now(self) -> PaymentStatus:
        """
        Verificação manual: a mesma consulta do timer, sem limite adicional.
        Retorna o estado após aplicar o resultado. Se o poller for parado no
        meio, o resultado é descartado e o estado atual é retornado.
        """
        event = await self._fetch()
        if event is not None:
            done = self._submit(event)
            if done is not None:
                await done
        return self.machine.state

    def tick(self, now: Optional[datetime] = None) -> None:
        self._submit(ClockTick(now or self._clock()))

    # ========== INTERNO ==========

    @property
    def _transaction_id(self) -> Optional[str]:
        transaction = self.machine.transaction
        return transaction.transaction_id if transaction else None

    async def _fetch(self) -> Optional[StatusChecked]:
        transaction_id = self._transaction_id
        if self.machine.is_terminal or not transaction_id:
            return None

        self._in_flight = True
        try:
            snapshot = await self.source.check_status(transaction_id)
            return StatusChecked(snapshot=snapshot)
        except Exception as e:
            logger.warning(f"⚠️ Falha ao consultar status de {transaction_id} (nova tentativa no próximo ciclo): {e}")
            return StatusChecked(error=e)
        finally:
            self._in_flight = False

    def _submit(self, event: PollerEvent) -> Optional[asyncio.Future]:
        """
        Com o poller rodando, enfileira o evento e devolve um future resolvido
        quando ele for aplicado ou descartado. Parado, aplica na hora.
        """
        if self.running and self._queue is not None:
            done = asyncio.get_running_loop().create_future()
            self._queue.put_nowait((event, done))
            return done
        self._apply(event)
        return None

    def _apply(self, event: PollerEvent) -> None:
        try:
            if isinstance(event, StatusChecked):
                if event.error is not None:
                    self.errors.append(event.error)
                elif event.snapshot is not None:
                    self.machine.apply_status(event.snapshot.status)
            else:
                self.machine.check_expiration(event.now)
                self.time_left = self.machine.time_left(event.now)
                if self._on_tick is not None:
                    self._on_tick(self.time_left)
        finally:
            if self.machine.is_terminal:
                self._terminal.set()

    @staticmethod
    def _drain(queue: asyncio.Queue) -> None:
        while not queue.empty():
            _, done = queue.get_nowait()
            queue.task_done()
            if not done.done():
                done.set_result(None)

    async def _consume(self) -> None:
        queue = self._queue
        try:
            while not self.machine.is_terminal:
                event, done = await queue.get()
                try:
                    self._apply(event)
                except Exception as e:
                    # falha de listener/on_paid não derruba o acompanhamento
                    logger.exception(f"❌ Erro ao aplicar {type(event).__name__} em {self._transaction_id}: {e}")
                    self.errors.append(e)
                finally:
                    queue.task_done()
                    if not done.done():
                        done.set_result(None)
        finally:
            for task in self._producers:
                task.cancel()
            # eventos que chegaram depois do estado final são descartados
            self._drain(queue)
        logger.info(f"⏹️ Acompanhamento de {self._transaction_id} encerrado em {self.machine.state.value}")

    async def _poll_loop(self) -> None:
        while True:
            await self._sleep(self.poll_interval)
            await self.poll_once()

    async def _tick_loop(self) -> None:
        while True:
            await self._sleep(self.tick_interval)
            self.tick()
