import logging
import math
from typing import Any, Dict, List, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

Number = Union[int, float]
ModelT = TypeVar("ModelT", bound=BaseModel)


def to_number(value: Any) -> Number:
    """Coerce an upstream value to a finite number; anything else becomes 0."""
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else 0
    if isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError:
            return 0
        return parsed if math.isfinite(parsed) else 0
    return 0


def numeric_map(value: Any) -> Dict[str, Number]:
    if not isinstance(value, dict):
        return {}
    return {str(k): to_number(v) for k, v in value.items()}


def parse_payload(model: Type[ModelT], data: Any) -> ModelT:
    """Validate an upstream payload, degrading to the model's empty default."""
    try:
        return model.model_validate(data if data is not None else {})
    except ValidationError as e:
        logger.warning(f"Malformed {model.__name__} payload, using defaults: {e.error_count()} error(s)")
        return model()


def valid_items(model: Type[ModelT], rows: Any, field: str) -> List[ModelT]:
    """Validate list elements one by one, dropping (and logging) those that fail."""
    if not isinstance(rows, list):
        return []
    items: List[ModelT] = []
    for index, row in enumerate(rows):
        try:
            items.append(model.model_validate(row))
        except ValidationError as e:
            logger.warning(f"Dropping malformed {field}[{index}]: {e.error_count()} error(s)")
    return items
