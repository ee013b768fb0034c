# src/fnrunner/core/config/errors.py
"""
Exceções canônicas da camada de configuração do fnrunner.

As exceções aqui definidas representam violações estruturais da
configuração da run, e não erros de execução de Filters.

Invariantes:
    - Todas as exceções de configuração herdam de `ConfigError`
    - Nenhuma exceção representa erro de execução do pipeline

Limites explícitos:
    - Não realiza fallback ou recovery
    - Não depende de engine ou pipeline
"""


class ConfigError(Exception):
    """
    Exceção base para erros relacionados à configuração da run.

    Permite captura genérica de erros de configuração e distinção clara
    entre falhas estruturais e falhas de execução.
    """


class ConfigNotFoundError(ConfigError):
    """
    Exceção levantada quando o arquivo de configuração base não existe.

    Decisões arquiteturais:
        - O arquivo base é obrigatório
        - O arquivo local de overrides é opcional e pode não existir
    """


class UnsupportedConfigFormatError(ConfigError):
    """
    Exceção levantada quando o formato do arquivo de configuração
    não é suportado pelo loader.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidConfigRootTypeError(ConfigError):
    """
    Exceção levantada quando o conteúdo raiz da configuração
    não é um dicionário (`dict`).
    """


class ConfigTypeConflictError(ConfigError):
    """
    Exceção levantada quando ocorre conflito de tipos durante o deep-merge.

    Exemplo de conflito:
        - base:     {"global_scope": false}
        - override: {"global_scope": "yes"}

    Invariantes:
        - Nenhum merge parcial é produzido em caso de conflito
    """


class InvalidConfigValueError(ConfigError):
    """
    Exceção levantada quando uma chave da configuração resolvida é
    desconhecida, obrigatória e ausente, ou possui tipo inválido.
    """
