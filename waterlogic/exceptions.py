class WLError(Exception): ...


class IngestError(WLError): ...


class InvalidMonthError(WLError): ...


class StoreError(WLError): ...


class WizardError(WLError): ...


class MappingError(WLError):
    """Column mapping / import target problems, all collected at once."""

    def __init__(self, messages: list[str]):
        super().__init__("; ".join(messages))
        self.messages = list(messages)


def require(condition: bool, message: str, exc: type[WLError] = WLError):
    """Raise the given exception if condition is False."""
    if not condition:
        raise exc(message)
