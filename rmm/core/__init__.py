"""
Core numeric engine: fixed point, special functions, replication maths,
domain models and contracts.

Модули core не зависят от пула, арбитража и симуляции.
"""
