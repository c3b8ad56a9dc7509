"""
JSON Schema Contract Validators

Валидация данных на границах с внешними участниками:
- pool_snapshot.json      — калибровка и резервы пула от ledger
  (VirtualPool.from_snapshot / to_snapshot)
- simulation_result.json  — временные ряды одного прогона симуляции
  (SimulationResult.to_dict)

Схемы лежат в schema/ рядом с модулем и ставятся вместе с пакетом
(package-data). Каждая схема проходит meta-validation по Draft 2020-12
при первой загрузке; валидаторы контрактов создаются один раз на импорт.

Использует библиотеку jsonschema (Draft 2020-12).
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterator

import jsonschema
from jsonschema import Draft202012Validator, ValidationError


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """
    Загрузчик JSON Schema файлов контрактов RMM.

    Схемы кэшируются по имени: повторная загрузка возвращает тот же dict.
    """

    def __init__(self):
        self._schema_dir = Path(__file__).parent / "schema"
        if not self._schema_dir.exists():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")

        self._schemas: Dict[str, Dict[str, Any]] = {}

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Загрузка и meta-validation схемы контракта.

        Args:
            schema_name: Имя контракта без расширения ('pool_snapshot',
                'simulation_result')

        Returns:
            Схема как dict (из кэша при повторном вызове)

        Raises:
            FileNotFoundError: Если файла schema/<schema_name>.json нет
            ValueError: Если файл не является допустимой Draft 2020-12 схемой
        """
        cached = self._schemas.get(schema_name)
        if cached is not None:
            return cached

        schema_path = self._schema_dir / f"{schema_name}.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")

        with open(schema_path, "r", encoding="utf-8") as f:
            schema = json.load(f)

        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {schema_name}.json: {e}") from e

        self._schemas[schema_name] = schema
        return schema


_SCHEMA_LOADER = SchemaLoader()


# =============================================================================
# CONTRACT VALIDATORS
# =============================================================================


class ContractValidator:
    """
    Валидатор одного контракта поверх Draft202012Validator.

    Attributes:
        schema_name: Имя контракта
        schema: Загруженная схема
        validator: Скомпилированный jsonschema валидатор
    """

    def __init__(self, schema_name: str):
        """
        Args:
            schema_name: Имя контракта в schema/ (без .json)

        Raises:
            FileNotFoundError: Если схемы нет
        """
        self.schema_name = schema_name
        self.schema = _SCHEMA_LOADER.load_schema(schema_name)
        self.validator = Draft202012Validator(self.schema)

    def validate(self, data: Dict[str, Any]) -> None:
        """
        Проверка данных против контракта.

        Args:
            data: Снапшот или результат симуляции (JSON-совместимый dict)

        Raises:
            ValidationError: Первое найденное нарушение схемы
        """
        self.validator.validate(data)

    def is_valid(self, data: Dict[str, Any]) -> bool:
        """
        Проверка без исключения.

        Returns:
            True, если data соответствует контракту
        """
        return self.validator.is_valid(data)

    def iter_errors(self, data: Dict[str, Any]) -> Iterator[ValidationError]:
        """
        Все нарушения контракта, а не только первое.

        Yields:
            ValidationError на каждое нарушение (путь в error.absolute_path)
        """
        return self.validator.iter_errors(data)


class PoolSnapshotValidator(ContractValidator):
    """pool_snapshot: calibration + reserve (целые Wei строками) + now."""

    def __init__(self):
        super().__init__("pool_snapshot")


class SimulationResultValidator(ContractValidator):
    """simulation_result: параметры прогона и временные ряды цен и LP value."""

    def __init__(self):
        super().__init__("simulation_result")


_POOL_SNAPSHOT_VALIDATOR = PoolSnapshotValidator()
_SIMULATION_RESULT_VALIDATOR = SimulationResultValidator()


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def validate_pool_snapshot(data: Dict[str, Any]) -> None:
    """
    Валидация снапшота пула перед построением VirtualPool и после to_snapshot.

    Args:
        data: Снапшот пула

    Raises:
        ValidationError: Если снапшот не соответствует pool_snapshot.json
    """
    _POOL_SNAPSHOT_VALIDATOR.validate(data)


def validate_simulation_result(data: Dict[str, Any]) -> None:
    """
    Валидация сериализованного результата симуляции.

    Args:
        data: SimulationResult.to_dict()

    Raises:
        ValidationError: Если данные не соответствуют simulation_result.json
    """
    _SIMULATION_RESULT_VALIDATOR.validate(data)
