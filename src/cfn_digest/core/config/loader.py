# src/cfn_digest/core/config/loader.py
"""
Loader canônico de configuração do cfn-digest.

A configuração efetiva é resolvida a partir de:
    - `DEFAULT_CONFIG` (embutido, sempre presente)
    - um arquivo de defaults do projeto (opcional, mas obrigatório se informado)
    - um arquivo local de overrides (opcional, ignorado se ausente)

Responsabilidades do módulo:
    - Carregar arquivos de configuração em YAML ou JSON
    - Validar requisitos estruturais mínimos (tipo raiz)
    - Resolver a configuração final via deep-merge determinístico
    - Validar o domínio dos valores resolvidos

Princípios fundamentais:
    - Configuração é declarativa e explícita
    - Precedência fixa: embutido < defaults do projeto < local
    - Erros estruturais são tratados como falhas fatais

Invariantes:
    - O resultado é sempre um dicionário puro (`dict`)
    - Overrides nunca mutam os defaults

Limites explícitos:
    - Não lê templates CloudFormation
    - Não persiste configuração ou hash
"""

from pathlib import Path
from typing import Any, Dict, Optional
import json

import yaml  # PyYAML

from .defaults import resolve_config
from .errors import (
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)
from .merge import deep_merge

_PARSERS = {
    ".yaml": yaml.safe_load,
    ".yml": yaml.safe_load,
    ".json": json.load,
}


def _load_file(path: Path) -> Dict[str, Any]:
    """
    Carrega um arquivo de configuração e valida sua estrutura básica.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)

    Arquivos vazios são interpretados como dicionários vazios.

    Args:
        path (Path): Caminho para o arquivo de configuração.

    Returns:
        Dict[str, Any]: Conteúdo do arquivo carregado como dicionário.

    Raises:
        DefaultsNotFoundError: Se o arquivo não existir.
        UnsupportedConfigFormatError: Se o formato do arquivo não for suportado.
        InvalidConfigRootTypeError: Se o conteúdo raiz não for um dicionário.
    """
    if not path.exists():
        raise DefaultsNotFoundError(f"Arquivo de configuração não encontrado: {path}")

    parser = _PARSERS.get(path.suffix.lower())
    if parser is None:
        raise UnsupportedConfigFormatError(f"Formato não suportado: {path.suffix}")

    with path.open("r", encoding="utf-8") as f:
        data = parser(f)

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(
            f"Config root deve ser dict, recebido: {type(data).__name__}"
        )

    return data


def load_config(
    *,
    defaults_path: Optional[str] = None,
    local_path: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Carrega e resolve a configuração efetiva do cálculo de digests.

    Política de resolução:
        - Sem arquivos, o resultado equivale a `DEFAULT_CONFIG`
        - `defaults_path`, quando informado, deve existir
        - `local_path` é opcional; quando o arquivo existe, tem prioridade

    Args:
        defaults_path (Optional[str]): Caminho para os defaults do projeto.
        local_path (Optional[str]): Caminho opcional para overrides locais.

    Returns:
        Dict[str, Any]: Configuração final resolvida e validada.

    Raises:
        DefaultsNotFoundError: Se o arquivo de defaults informado não existir.
        UnsupportedConfigFormatError: Se o formato do arquivo não for suportado.
        InvalidConfigRootTypeError: Se o conteúdo não for um dicionário.
        ConfigTypeConflictError: Se ocorrer conflito estrutural durante o merge.
        InvalidConfigValueError: Se algum valor resolvido for inválido.
    """
    overrides: Dict[str, Any] = {}

    if defaults_path is not None:
        overrides = _load_file(Path(defaults_path))

    if local_path is not None:
        local_file = Path(local_path)
        if local_file.exists():
            overrides = deep_merge(overrides, _load_file(local_file))

    return resolve_config(overrides)
