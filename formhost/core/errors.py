from fastapi import HTTPException, status


class FieldValidationError(HTTPException):
    def __init__(self, errors: list, message: str = "Field validation failed"):
        self.errors = errors
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": message, "errors": errors},
        )


class InvalidInput(HTTPException):
    def __init__(self, message: str):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": message},
        )


class ConflictError(HTTPException):
    def __init__(self, message: str):
        self.message = message
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=message)


class NotFoundError(HTTPException):
    def __init__(self, entity: str):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=f"{entity} not found")


class FieldLimitExceeded(HTTPException):
    def __init__(self, limit: int, received: int):
        super().__init__(
            status_code=413,
            detail={
                "message": "Too many fields",
                "limit": limit,
                "received": received,
            },
        )


class TransactionFailure(HTTPException):
    # Underlying store error; the cause is logged, never returned
    def __init__(self):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Server error")


class IdGenerationExhausted(HTTPException):
    def __init__(self, prefix: str):
        self.prefix = prefix
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Could not generate unique id",
        )
