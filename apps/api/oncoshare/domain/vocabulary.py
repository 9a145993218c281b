"""Reference-or-custom vocabulary values (tumour type, anatomical site).

A case stores either a vocabulary id or custom text for each of these, never
both. Reads expose the pair as one tagged value so callers cannot observe an
invalid combination.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union
from uuid import UUID

from pydantic import BaseModel, Field

UNKNOWN_LABEL = "Unknown"


class Referenced(BaseModel):
    kind: Literal["referenced"] = "referenced"
    id: UUID
    name: str | None = None


class Custom(BaseModel):
    kind: Literal["custom"] = "custom"
    text: str


class Unspecified(BaseModel):
    kind: Literal["unspecified"] = "unspecified"


VocabularyChoice = Annotated[
    Union[Referenced, Custom, Unspecified],
    Field(discriminator="kind"),
]


def vocabulary_choice(
    ref_id: UUID | None,
    ref_name: str | None,
    custom: str | None,
) -> Referenced | Custom | Unspecified:
    """Build the tagged value from the stored (id, custom text) pair."""
    if ref_id is not None:
        return Referenced(id=ref_id, name=ref_name)
    if custom and custom.strip():
        return Custom(text=custom.strip())
    return Unspecified()


def display_name(choice: Referenced | Custom | Unspecified) -> str:
    """Label for grouping: vocabulary name, then custom text, then "Unknown"."""
    if isinstance(choice, Referenced) and choice.name:
        return choice.name
    if isinstance(choice, Custom):
        return choice.text
    return UNKNOWN_LABEL
