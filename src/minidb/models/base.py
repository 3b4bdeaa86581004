"""Base models for MiniDB."""

from pydantic import BaseModel, ConfigDict


class MiniDBBaseModel(BaseModel):
    """Base model for schema and snapshot entities.

    Fields are populated by name or by their camelCase alias, and serialized
    with aliases so snapshots round-trip through JSON unchanged.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=True,
        extra="forbid",
    )

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict using field aliases."""
        return self.model_dump(mode="json", by_alias=True)
