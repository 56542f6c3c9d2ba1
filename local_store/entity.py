"""Base entity model persisted by the document store."""

from __future__ import annotations

import uuid
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field


def namespace_of(model: type, namespace: str | None = None) -> str:
    """Return the directory key for *model*.

    An explicit *namespace* wins; otherwise the model's ``namespace`` class
    variable is used.
    """
    if namespace:
        return namespace
    declared = getattr(model, "namespace", "")
    if isinstance(declared, str) and declared:
        return declared
    raise ValueError(
        f"{model.__name__} declares no namespace; set `namespace` on the class or pass namespace="
    )


class Entity(BaseModel):
    """A value with a stable ``id`` stored as ``<namespace>/<id>.json``.

    Subclasses set the ``namespace`` class variable to name their directory::

        class Contact(Entity):
            namespace = "Contact"
            title: str
    """

    model_config = ConfigDict(
        from_attributes=True,
        extra="allow",
    )

    namespace: ClassVar[str] = ""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
