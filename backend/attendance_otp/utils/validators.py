"""Validation utilities for request payloads."""
from datetime import date
from typing import Any, Dict, List, Optional


class ValidationError(Exception):
    """Raised when a request payload is malformed."""
    pass


class Validator:
    """Validation helper class."""

    @staticmethod
    def validate_required_fields(data: Dict, required_fields: List[str]) -> Dict[str, Any]:
        """Validate required fields in data."""
        errors = []

        for field in required_fields:
            if field not in data or data[field] in (None, ''):
                errors.append(f"{field} is required")

        return {
            "is_valid": len(errors) == 0,
            "errors": errors
        }

    @staticmethod
    def require(data: Optional[Dict], required_fields: List[str]) -> Dict:
        """Return data if every required field is present, raise otherwise."""
        if not isinstance(data, dict):
            raise ValidationError("Request body must be JSON")

        result = Validator.validate_required_fields(data, required_fields)
        if not result["is_valid"]:
            raise ValidationError("; ".join(result["errors"]))
        return data

    @staticmethod
    def parse_coordinate(value: Any, name: str, limit: float) -> Optional[float]:
        """Parse an optional latitude/longitude hint."""
        if value is None or value == '':
            return None
        try:
            coordinate = float(value)
        except (TypeError, ValueError):
            raise ValidationError(f"{name} must be a number")
        if not -limit <= coordinate <= limit:
            raise ValidationError(f"{name} is out of range")
        return coordinate

    @staticmethod
    def parse_day(value: Any) -> Optional[date]:
        """Parse an optional ISO calendar date (YYYY-MM-DD)."""
        if value is None or value == '':
            return None
        try:
            return date.fromisoformat(str(value))
        except ValueError:
            raise ValidationError("day must be an ISO date (YYYY-MM-DD)")

    @staticmethod
    def parse_id_list(value: Any, name: str, max_items: int = 500) -> List[str]:
        """Parse a non-empty list of string identifiers."""
        if not isinstance(value, list) or not value:
            raise ValidationError(f"{name} must be a non-empty list")
        if len(value) > max_items:
            raise ValidationError(f"Maximum {max_items} entries allowed in {name}")
        ids = [str(item).strip() for item in value]
        if any(not item for item in ids):
            raise ValidationError(f"{name} contains an empty identifier")
        return ids
