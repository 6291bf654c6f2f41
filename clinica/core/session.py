"""
Sesiones del lado del servidor.

El navegador sólo guarda un token opaco en una cookie HttpOnly; los datos
(`id, nombre, correo, rol, logueado, timestamp`) viven en un `SessionStore`.
`MemorySessionStore` sirve para desarrollo y tests; en producción se usa
`RedisSessionStore` cuando hay `REDIS_URL`.
"""
import abc
import json
import logging
import secrets
import time
from typing import Any, Callable

from clinica.core.config import Settings

logger = logging.getLogger(__name__)


def nuevo_token() -> str:
    return secrets.token_urlsafe(32)


class SessionStore(abc.ABC):
    @abc.abstractmethod
    async def cargar(self, token: str) -> dict[str, Any] | None: ...

    @abc.abstractmethod
    async def guardar(self, token: str, datos: dict[str, Any]) -> None: ...

    @abc.abstractmethod
    async def eliminar(self, token: str) -> None: ...


class MemorySessionStore(SessionStore):
    def __init__(self, ttl_seconds: int = 0, reloj: Callable[[], float] = time.time):
        self.ttl_seconds = ttl_seconds
        self.reloj = reloj
        self._datos: dict[str, tuple[float, dict[str, Any]]] = {}

    def __len__(self) -> int:
        return len(self._datos)

    def _vencida(self, guardado_en: float, ahora: float) -> bool:
        return bool(self.ttl_seconds) and ahora - guardado_en > self.ttl_seconds

    def purgar(self) -> int:
        """Descarta las sesiones vencidas; devuelve cuántas quitó."""
        if not self.ttl_seconds:
            return 0
        ahora = self.reloj()
        vencidas = [t for t, (guardado_en, _) in self._datos.items() if self._vencida(guardado_en, ahora)]
        for token in vencidas:
            del self._datos[token]
        return len(vencidas)

    async def cargar(self, token: str) -> dict[str, Any] | None:
        item = self._datos.get(token)
        if item is None:
            return None
        guardado_en, datos = item
        if self._vencida(guardado_en, self.reloj()):
            del self._datos[token]
            return None
        return dict(datos)

    async def guardar(self, token: str, datos: dict[str, Any]) -> None:
        # las sesiones abandonadas nunca se vuelven a cargar: se barren al escribir
        self.purgar()
        self._datos[token] = (self.reloj(), dict(datos))

    async def eliminar(self, token: str) -> None:
        self._datos.pop(token, None)


class RedisSessionStore(SessionStore):
    def __init__(self, url: str, ttl_seconds: int, prefix: str = "clinica:sesion:"):
        from redis import asyncio as aioredis

        self._redis = aioredis.from_url(url, decode_responses=True)
        self.ttl_seconds = ttl_seconds
        self.prefix = prefix

    async def cargar(self, token: str) -> dict[str, Any] | None:
        raw = await self._redis.get(self.prefix + token)
        return json.loads(raw) if raw else None

    async def guardar(self, token: str, datos: dict[str, Any]) -> None:
        await self._redis.set(self.prefix + token, json.dumps(datos), ex=self.ttl_seconds or None)

    async def eliminar(self, token: str) -> None:
        await self._redis.delete(self.prefix + token)


def crear_session_store(settings: Settings) -> SessionStore:
    if settings.REDIS_URL:
        logger.info("Sesiones en Redis")
        return RedisSessionStore(settings.REDIS_URL, settings.SESSION_TTL_SECONDS)
    return MemorySessionStore(settings.SESSION_TTL_SECONDS)


class Sesion:
    """Vista por request de la sesión; el despachador persiste los cambios al final."""

    def __init__(self, token: str | None = None, datos: dict[str, Any] | None = None):
        self.token = token
        self.token_original = token
        self.datos: dict[str, Any] = dict(datos or {})
        self.modificada = False
        self.destruida = False

    @property
    def logueado(self) -> bool:
        return self.datos.get("logueado") is True

    @property
    def usuario_id(self) -> int | None:
        return self.datos.get("id")

    @property
    def rol(self) -> str | None:
        return self.datos.get("rol")

    def usuario(self) -> dict[str, Any]:
        return {k: self.datos.get(k) for k in ("id", "nombre", "correo", "rol")}

    def iniciar(self, usuario: dict[str, Any]) -> None:
        # token nuevo en cada login para no reutilizar uno previo
        self.token = nuevo_token()
        self.datos = {
            "id": usuario["id"],
            "nombre": usuario["nombre"],
            "correo": usuario["correo"],
            "rol": usuario["rol"],
            "logueado": True,
            "timestamp": int(time.time()),
        }
        self.modificada = True
        self.destruida = False

    def cerrar(self) -> None:
        self.datos = {}
        self.destruida = True
        self.modificada = False
