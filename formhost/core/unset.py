class _Unset:
    """Marks a partial-update argument as "leave unchanged".

    Distinct from None and "", which both mean "clear it" where clearing applies.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self):
        return False

    def __repr__(self):
        return "UNSET"


UNSET = _Unset()


def from_model(model, *names: str) -> dict:
    """Map a pydantic payload to kwargs, UNSET for every key the client omitted."""
    sent = model.model_fields_set
    return {n: (getattr(model, n) if n in sent else UNSET) for n in names}
