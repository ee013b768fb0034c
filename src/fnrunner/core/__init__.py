# src/fnrunner/core/__init__.py
"""
Core do fnrunner.

Este pacote reúne a lógica de orquestração: descoberta de funções,
política de inclusão, ordenação por profundidade, isolamento por
diretório e o pipeline sequencial de execução e escrita.

O core é projetado para ser:
    - determinístico
    - testável de forma isolada
    - livre de efeitos em disco até o estágio de escrita

Componentes principais:
    - config       → configuração imutável da run (RunConfig)
    - pipeline     → Resource, FunctionSpec, protocolo Filter, RunContext
    - io           → ResourceCollector e Writer/Sink
    - engine       → discovery, planner, scope guard e FunctionRunner
    - traceability → Manifest da execução

Limites explícitos:
    - Não executa containers diretamente (ver `fnrunner.filters`)
    - Não depende de CLI ou serviços externos
"""
