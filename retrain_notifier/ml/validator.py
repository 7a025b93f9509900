import json
import math

from retrain_notifier.core.errors import ValidationError


# rows of floats; the last value of each row is the training target
DataBatch = list[list[float]]

MIN_ROW_LENGTH = 2


def _to_float(value, row_index: int, col_index: int) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(
            f"Row {row_index} column {col_index}: expected a number, got {type(value).__name__}"
        )
    try:
        number = float(value)
    except OverflowError:
        raise ValidationError(f"Row {row_index} column {col_index}: number out of range")
    if not math.isfinite(number):
        raise ValidationError(f"Row {row_index} column {col_index}: number must be finite")
    return number


def validate_batch(payload, min_rows: int = 1) -> DataBatch:
    """
    Check an already-decoded payload is a usable training batch:
    - a non-empty list of rows
    - every row a list of at least two finite numbers (features + target)
    - every row the same length
    """
    if not isinstance(payload, list):
        raise ValidationError("Batch must be a JSON array of numeric arrays")
    if not payload:
        raise ValidationError("Batch is empty")
    if len(payload) < min_rows:
        raise ValidationError(f"Not enough rows ({len(payload)}/{min_rows})")

    width = None
    batch: DataBatch = []
    for i, row in enumerate(payload):
        if not isinstance(row, list):
            raise ValidationError(f"Row {i} must be an array of numbers")
        if len(row) < MIN_ROW_LENGTH:
            raise ValidationError(
                f"Row {i} needs at least {MIN_ROW_LENGTH} values (features and target)"
            )
        if width is None:
            width = len(row)
        elif len(row) != width:
            raise ValidationError(f"Row {i} has {len(row)} values, expected {width}")
        batch.append([_to_float(v, i, j) for j, v in enumerate(row)])

    return batch


def parse_batch(body: bytes, min_rows: int = 1) -> DataBatch:
    if not body or not body.strip():
        raise ValidationError("Request body is empty")
    try:
        payload = json.loads(body)
    except (UnicodeDecodeError, ValueError) as e:
        raise ValidationError(f"Request body is not valid JSON: {e}")
    return validate_batch(payload, min_rows=min_rows)


def validate_features(payload, n_features: int) -> list[list[float]]:
    """Rows to score: feature values only, no target column."""
    if not isinstance(payload, list) or not payload:
        raise ValidationError("Expected a non-empty JSON array of feature arrays")
    rows = []
    for i, row in enumerate(payload):
        if not isinstance(row, list) or len(row) != n_features:
            raise ValidationError(f"Row {i} must be an array of {n_features} numbers")
        rows.append([_to_float(v, i, j) for j, v in enumerate(row)])
    return rows
