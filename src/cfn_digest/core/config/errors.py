# src/cfn_digest/core/config/errors.py
"""
Exceções canônicas da camada de configuração do cfn-digest.

Hierarquia utilizada durante carregamento, merge e validação da
configuração que governa o cálculo de digests (algoritmo, ordem de
dependências, política de ciclos, tipos excluídos).

Invariantes:
    - Todas as exceções de configuração herdam de `ConfigError`
    - Nenhuma exceção aqui representa falha do cálculo de digests
"""


class ConfigError(Exception):
    """
    Exceção base para erros de configuração do cfn-digest.

    Permite captura genérica de falhas de configuração, distinta de
    falhas estruturais do grafo ou do template.
    """


class DefaultsNotFoundError(ConfigError):
    """
    Exceção levantada quando um arquivo de defaults explicitamente
    informado não existe.

    Decisões arquiteturais:
        - Um caminho de defaults informado é obrigatório
        - Sem caminho, os defaults embutidos (`DEFAULT_CONFIG`) são usados
    """


class UnsupportedConfigFormatError(ConfigError):
    """
    Exceção levantada quando o formato do arquivo não é suportado.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidConfigRootTypeError(ConfigError):
    """
    Exceção levantada quando o conteúdo raiz do arquivo não é um `dict`.
    """


class ConfigTypeConflictError(ConfigError):
    """
    Exceção levantada quando ocorre conflito de tipos durante o deep-merge.

    Exemplo de conflito:
        - base:     {"graph": {"on_cycle": "omit"}}
        - override: {"graph": "raise"}

    Invariantes:
        - Nenhum merge parcial é produzido em caso de conflito
    """


class InvalidConfigValueError(ConfigError):
    """
    Exceção levantada quando um valor da configuração resolvida está
    fora do domínio permitido (ex.: `graph.on_cycle: ignore`).
    """
