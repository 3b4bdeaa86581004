"""Query result envelope."""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field, model_validator

from minidb.models.base import MiniDBBaseModel
from minidb.models.snapshot import Snapshot


class ResultKind(str, Enum):
    """Shape of the data a successful query returns."""

    TABLE = "table"
    SET = "set"
    TABLES = "tables"


class QueryResult(MiniDBBaseModel):
    """Uniform result of executing one query.

    Either ``data`` and ``result_kind`` are set (success) or ``error`` is set
    (failure), never both.
    """

    data: Optional[List[Dict[str, Any]]] = Field(default=None, description="Result records")
    result_kind: Optional[ResultKind] = Field(
        default=None, alias="resultKind", description="Shape of the result"
    )
    affected_row_count: Optional[int] = Field(
        default=None, alias="affectedRowCount", description="Rows changed by a mutation"
    )
    snapshot: Optional[Snapshot] = Field(
        default=None, description="Database state after a mutation, when requested"
    )
    error: Optional[str] = Field(default=None, description="Error message")
    error_type: Optional[str] = Field(
        default=None, alias="errorType", description="Error category"
    )

    @model_validator(mode="after")
    def _data_xor_error(self) -> "QueryResult":
        if self.error is not None:
            if self.data is not None or self.result_kind is not None:
                raise ValueError("A failed result cannot carry data")
        elif self.data is None or self.result_kind is None:
            raise ValueError("A successful result needs data and a result kind")
        return self

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(
        cls,
        data: List[Dict[str, Any]],
        result_kind: ResultKind,
        affected_row_count: Optional[int] = None,
        snapshot: Optional[Snapshot] = None,
    ) -> "QueryResult":
        return cls(
            data=data,
            result_kind=result_kind,
            affected_row_count=affected_row_count,
            snapshot=snapshot,
        )

    @classmethod
    def failure(cls, message: str, error_type: str = "error") -> "QueryResult":
        return cls(error=message, error_type=error_type)

    def to_dict(self) -> dict:
        """Serialize, leaving out fields that are not set."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
