# src/fnrunner/core/config/settings.py
"""
Configuração imutável de uma run do fnrunner.

O orquestrador recebe exatamente um `RunConfig` por invocação e o repassa
explicitamente a todos os componentes; nenhum componente lê estado
ambiente ou global.

Campos:
    - package_root: raiz do pacote (descoberta implícita e escrita in-place)
    - function_paths: fontes explícitas de funções, na ordem informada
    - inclusion: InclusionPolicy (DEFAULT / FORCE_SKIP / FORCE_INCLUDE)
    - global_scope: quando True, toda função é tratada como global
    - output: destino do stream combinado (None = escrita in-place)
    - manifest_path: destino opcional do Manifest da run (JSON)

Mapeamento a partir de dicionário (arquivo de configuração):
    - include_package_functions: null → DEFAULT, true → FORCE_INCLUDE,
      false → FORCE_SKIP
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, TextIO, Tuple, Union

from ..pipeline.types import InclusionPolicy
from .errors import InvalidConfigValueError

OutputTarget = Union[str, Path, TextIO]

KNOWN_KEYS = frozenset(
    {
        "package_root",
        "function_paths",
        "include_package_functions",
        "global_scope",
        "output",
        "manifest_path",
    }
)


@dataclass(frozen=True)
class RunConfig:
    """Configuração imutável de uma única invocação."""

    package_root: Path
    function_paths: Tuple[Path, ...] = ()
    inclusion: InclusionPolicy = InclusionPolicy.DEFAULT
    global_scope: bool = False
    output: Optional[OutputTarget] = None
    manifest_path: Optional[Path] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "package_root", Path(self.package_root))
        object.__setattr__(
            self, "function_paths", tuple(Path(p) for p in (self.function_paths or ()))
        )
        object.__setattr__(self, "inclusion", InclusionPolicy(self.inclusion))
        if isinstance(self.output, str):
            object.__setattr__(self, "output", Path(self.output))
        if self.manifest_path is not None:
            object.__setattr__(self, "manifest_path", Path(self.manifest_path))

    @property
    def has_explicit_sources(self) -> bool:
        return len(self.function_paths) > 0

    @property
    def writes_in_place(self) -> bool:
        return self.output is None

    def to_dict(self) -> Dict[str, Any]:
        """Representação serializável (usada para hashing e Manifest)."""
        if self.output is None:
            output: Optional[str] = None
        elif isinstance(self.output, Path):
            output = str(self.output)
        else:
            output = "<stream>"
        return {
            "package_root": str(self.package_root),
            "function_paths": [str(p) for p in self.function_paths],
            "inclusion": self.inclusion.value,
            "global_scope": self.global_scope,
            "output": output,
            "manifest_path": str(self.manifest_path) if self.manifest_path else None,
        }

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "RunConfig":
        """
        Constrói um RunConfig a partir de um dicionário já resolvido.

        Raises:
            InvalidConfigValueError: chave desconhecida, `package_root`
                ausente ou valor com tipo inválido.
        """
        unknown = sorted(set(data) - KNOWN_KEYS)
        if unknown:
            raise InvalidConfigValueError(f"Chaves de configuração desconhecidas: {unknown}")

        root = data.get("package_root")
        if not isinstance(root, str) or not root.strip():
            raise InvalidConfigValueError("package_root deve ser uma string não vazia")

        paths = data.get("function_paths") or []
        if not isinstance(paths, list) or not all(isinstance(p, str) and p for p in paths):
            raise InvalidConfigValueError("function_paths deve ser uma lista de strings")

        include = data.get("include_package_functions")
        if include is not None and not isinstance(include, bool):
            raise InvalidConfigValueError("include_package_functions deve ser null, true ou false")
        inclusion = InclusionPolicy.from_flag(None if include is None else not include)

        global_scope = data.get("global_scope", False)
        if not isinstance(global_scope, bool):
            raise InvalidConfigValueError("global_scope deve ser booleano")

        output = data.get("output")
        if output is not None and not isinstance(output, str):
            raise InvalidConfigValueError("output deve ser string (path) ou null")

        manifest_path = data.get("manifest_path")
        if manifest_path is not None and not isinstance(manifest_path, str):
            raise InvalidConfigValueError("manifest_path deve ser string (path) ou null")

        return cls(
            package_root=Path(root),
            function_paths=tuple(Path(p) for p in paths),
            inclusion=inclusion,
            global_scope=global_scope,
            output=Path(output) if output else None,
            manifest_path=Path(manifest_path) if manifest_path else None,
        )
