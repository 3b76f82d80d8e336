from typing import Any


class ClankerKitError(Exception):
    """
    Base exception used as the parent class for all exceptions raised by this package.

    Calling code should catch `ClankerKitError` and derived classes separately before general
    exceptions, e.g.:

    ```
    try:
        clankerkit.some_function()
    except SpecificClankerKitError:
        ... # handle a specific exception
    except ClankerKitError:
        ... # handle non-specific clankerkit exception
    except Exception:
        ... # handle exceptions raised by 3rd party dependencies or Python built-ins
    ```

    An optional string-formatted message may be attached to the exception and retrieved by accessing
    the `.message` attribute.
    """

    message: str | None = None

    def __init__(self, message: str | None = None) -> None:
        if message:
            self.message = message
            super().__init__(message)


class ClankerKitValueError(ClankerKitError): ...


class ExternalServiceError(ClankerKitError):
    """
    Raised on errors resulting to some call to an external service.
    """

    def __init__(self, error: str) -> None:
        self.error = error
        super().__init__(message=f"External service error: {error}")

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.error,)
