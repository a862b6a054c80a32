"""Application error types."""


class FuelRxError(Exception):
    """Base error for the application."""


class NutritionRecordNotFoundError(FuelRxError):
    """Raised when an ingredient nutrition record does not exist."""


class UsdaFoodNotFoundError(FuelRxError):
    """Raised when USDA FoodData Central has no food for an id."""


class JsonRepairExhaustedError(FuelRxError):
    """Raised when no repair strategy recovers a prep session array."""

    def __init__(
        self, message: str, raw_response: str, error_position: int | None = None
    ) -> None:
        super().__init__(message)
        self.raw_response = raw_response
        self.error_position = error_position


class InvalidPrepSessionsError(FuelRxError):
    """Raised when an LLM prep session payload has an unusable shape."""

    def __init__(self, message: str, raw_response: str) -> None:
        super().__init__(message)
        self.raw_response = raw_response
