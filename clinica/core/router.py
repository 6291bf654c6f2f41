"""
Enrutador mínimo: (método, patrón) -> handler.

Los patrones combinan segmentos literales y marcadores `{nombre}` que
aceptan cualquier tramo sin `/`. Al resolver se intenta primero la
coincidencia literal exacta y después los patrones, ordenados por
especificidad al registrarlos (segmento a segmento, un literal gana a un
marcador; a igual especificidad gana el registrado antes). Así
`/citas/buscar` no queda tapado por `/citas/{id}` aunque se registre después.
"""
import re
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from clinica.core.errors import NotFound

Handler = Callable[..., Awaitable[Any]]

_MARCADOR = re.compile(r"\{(\w+)\}")
METODOS = ("GET", "POST", "PUT", "PATCH", "DELETE")


def normalizar_ruta(path: str) -> str:
    path = path.rstrip("/")
    return path or "/"


def _compilar(path: str) -> re.Pattern[str]:
    partes = _MARCADOR.split(path)
    # split con grupo: posiciones pares literales, impares nombres de marcador
    regex = "".join(
        re.escape(p) if i % 2 == 0 else f"(?P<{p}>[^/]+)"
        for i, p in enumerate(partes)
    )
    return re.compile(f"^{regex}$")


def _especificidad(path: str) -> tuple[int, ...]:
    # 0 = literal, 1 = con marcador; menor ordena primero
    return tuple(1 if _MARCADOR.search(seg) else 0 for seg in path.strip("/").split("/"))


@dataclass(frozen=True)
class Ruta:
    method: str
    path: str
    handler: Handler
    orden: int
    pattern: re.Pattern[str] | None = field(default=None, compare=False)

    @property
    def es_literal(self) -> bool:
        return self.pattern is None

    def clave(self) -> tuple:
        esp = _especificidad(self.path)
        return (len(esp), esp, self.orden)


class Router:
    def __init__(self, prefix: str = ""):
        self.prefix = prefix.rstrip("/")
        self._literales: dict[str, dict[str, Ruta]] = {}
        self._patrones: dict[str, list[Ruta]] = {}
        self._rutas: list[Ruta] = []

    # ---------- registro ----------
    def agregar(self, method: str, path: str, handler: Handler) -> Ruta:
        method = method.upper()
        if method not in METODOS:
            raise ValueError(f"Método HTTP no soportado: {method}")
        completo = normalizar_ruta(self.prefix + path)

        if _MARCADOR.search(completo):
            ruta = Ruta(method, completo, handler, len(self._rutas), _compilar(completo))
            patrones = self._patrones.setdefault(method, [])
            if any(r.path == completo for r in patrones):
                raise ValueError(f"Ruta duplicada: {method} {completo}")
            patrones.append(ruta)
            patrones.sort(key=Ruta.clave)
        else:
            ruta = Ruta(method, completo, handler, len(self._rutas))
            literales = self._literales.setdefault(method, {})
            if completo in literales:
                raise ValueError(f"Ruta duplicada: {method} {completo}")
            literales[completo] = ruta

        self._rutas.append(ruta)
        return ruta

    def _decorador(self, method: str, path: str) -> Callable[[Handler], Handler]:
        def registrar(handler: Handler) -> Handler:
            self.agregar(method, path, handler)
            return handler
        return registrar

    def get(self, path: str):
        return self._decorador("GET", path)

    def post(self, path: str):
        return self._decorador("POST", path)

    def put(self, path: str):
        return self._decorador("PUT", path)

    def patch(self, path: str):
        return self._decorador("PATCH", path)

    def delete(self, path: str):
        return self._decorador("DELETE", path)

    def include_router(self, other: "Router") -> None:
        for ruta in other.rutas:
            self.agregar(ruta.method, ruta.path, ruta.handler)

    @property
    def rutas(self) -> list[Ruta]:
        """Rutas en orden de registro."""
        return list(self._rutas)

    # ---------- despacho ----------
    def resolver(self, method: str, path: str) -> tuple[Handler, dict[str, str]]:
        """Devuelve (handler, parámetros) o lanza NotFound con la ruta pedida."""
        method = method.upper()
        path = normalizar_ruta(path)

        ruta = self._literales.get(method, {}).get(path)
        if ruta is not None:
            return ruta.handler, {}

        for ruta in self._patrones.get(method, []):
            m = ruta.pattern.match(path)  # type: ignore[union-attr]
            if m:
                return ruta.handler, m.groupdict()

        raise NotFound(f"Endpoint no encontrado: {path}")
