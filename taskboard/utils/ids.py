from uuid import uuid4


def new_id() -> str:
    """Opaque string id for members, labels and reports."""
    return uuid4().hex
