"""
JSON Schema Contract Validators

Модуль для валидации JSON документов, которые движок отдаёт внешним
коллабораторам (операторский UI, custody). Использует библиотеку jsonschema.

Схемы (contracts/schema/):
- position_risk.json
- portfolio_risk.json
- liquidation_request.json
"""

import json
from pathlib import Path
from typing import Any, Dict

import jsonschema
from jsonschema import Draft202012Validator


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """
    Загрузчик JSON Schema файлов.

    Схемы поставляются как package data рядом с этим модулем.
    """

    def __init__(self, schema_dir: Path | None = None):
        self._schema_dir = schema_dir or Path(__file__).parent / "schema"
        if not self._schema_dir.exists():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")

        # Кэш загруженных схем
        self._schemas: Dict[str, Dict[str, Any]] = {}

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Загрузка JSON Schema файла.

        Args:
            schema_name: Имя схемы без расширения (например, 'position_risk')

        Returns:
            Загруженная схема как dict

        Raises:
            FileNotFoundError: Если файл схемы не найден
            ValueError: Если файл не является валидной JSON Schema
        """
        if schema_name in self._schemas:
            return self._schemas[schema_name]

        schema_path = self._schema_dir / f"{schema_name}.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")

        with open(schema_path, "r", encoding="utf-8") as f:
            schema = json.load(f)

        # Meta-validation
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
    """Базовый валидатор: данные против одной JSON Schema."""

    def __init__(self, schema_name: str):
        self.schema_name = schema_name
        self.schema = _SCHEMA_LOADER.load_schema(schema_name)
        self.validator = Draft202012Validator(self.schema)

    def validate(self, data: Dict[str, Any]) -> None:
        """
        Raises:
            jsonschema.ValidationError: Если данные не соответствуют схеме
        """
        self.validator.validate(data)

    def is_valid(self, data: Dict[str, Any]) -> bool:
        return self.validator.is_valid(data)

    def iter_errors(self, data: Dict[str, Any]):
        return self.validator.iter_errors(data)


class PositionRiskValidator(ContractValidator):
    def __init__(self):
        super().__init__("position_risk")


class PortfolioRiskValidator(ContractValidator):
    def __init__(self):
        super().__init__("portfolio_risk")


class LiquidationRequestValidator(ContractValidator):
    def __init__(self):
        super().__init__("liquidation_request")


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def validate_position_risk(data: Dict[str, Any]) -> None:
    """
    Валидация position_risk документа.

    Raises:
        ValidationError: Если данные не соответствуют схеме
    """
    PositionRiskValidator().validate(data)


def validate_portfolio_risk(data: Dict[str, Any]) -> None:
    """
    Валидация portfolio_risk документа.

    Raises:
        ValidationError: Если данные не соответствуют схеме
    """
    PortfolioRiskValidator().validate(data)


def validate_liquidation_request(data: Dict[str, Any]) -> None:
    """
    Валидация liquidation_request документа.

    Raises:
        ValidationError: Если данные не соответствуют схеме
    """
    LiquidationRequestValidator().validate(data)
