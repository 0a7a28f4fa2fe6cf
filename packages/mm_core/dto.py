from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseDTO(BaseModel):
    """
    Base class for every DTO (Data Transfer Object) in MockMate.

    Features:
        - from_attributes=True (build from plain objects)
        - str_strip_whitespace=True (strings are stripped automatically)
        - populate_by_name=True (camelCase aliases and snake_case names both accepted)
    """
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        populate_by_name=True
    )


class DocumentModel(BaseDTO):
    """
    Base class for persisted documents.
    Attributes are snake_case in Python and camelCase in the store.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        from_attributes=True,
        str_strip_whitespace=True,
        populate_by_name=True
    )

    def to_document(self) -> dict:
        """Store representation: camelCase keys, JSON-safe values, no `id`."""
        return self.model_dump(by_alias=True, mode="json", exclude={"id"})
