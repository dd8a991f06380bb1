# src/pytrips/utils/polling.py
"""
Espera acotada sobre un documento que cambia de forma asíncrona.

Todas las esperas de la navegación usan `poll_until`: intervalo fijo,
número máximo de intentos y nunca bloquean indefinidamente.
"""
import math
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional


@dataclass
class PollResult:
    found: bool
    value: Any = None
    attempts: int = 0

    def __bool__(self) -> bool:
        return self.found


def attempts_for(timeout: float, interval: float) -> int:
    """Convierte un timeout en segundos al número de intentos equivalente."""
    if interval <= 0:
        return 1
    return max(1, int(math.ceil(timeout / interval)))


def poll_until(predicate: Callable[[], Any],
               interval: float,
               max_attempts: int,
               sleep: Optional[Callable[[float], None]] = None) -> PollResult:
    """
    Evalúa `predicate` hasta que devuelva un valor verdadero o se agoten los intentos.
    Entre intentos espera `interval` segundos. Un timeout no es un error: se
    devuelve PollResult(found=False) y el llamador decide cómo degradar.
    """
    sleep = sleep or time.sleep
    attempts = 0

    for attempts in range(1, max(1, max_attempts) + 1):
        value = predicate()
        if value:
            return PollResult(found=True, value=value, attempts=attempts)
        if attempts < max_attempts:
            sleep(interval)

    return PollResult(found=False, value=None, attempts=attempts)
