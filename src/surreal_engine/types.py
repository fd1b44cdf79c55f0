"""
Typed wrappers for SurrealDB query results.

A ``query`` call answers with one entry per statement; each entry carries
a status, the statement's result (or error text) and its execution time.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .exceptions import ResponseError


class ResponseStatus(str, Enum):
    """Status of a single statement."""

    OK = "OK"
    ERR = "ERR"


@dataclass
class QueryResult:
    """
    Result of a single query statement.

    Attributes:
        status: OK or ERR
        result: Statement output, or the error message when status is ERR
        time: Execution time as reported by SurrealDB
    """

    status: ResponseStatus
    result: Any = None
    time: str = ""

    @classmethod
    def from_value(cls, data: Any) -> "QueryResult":
        if isinstance(data, dict) and "status" in data:
            return cls(
                status=ResponseStatus(data["status"]),
                result=data.get("result"),
                time=data.get("time", ""),
            )
        return cls(status=ResponseStatus.OK, result=data)

    @property
    def is_ok(self) -> bool:
        return self.status == ResponseStatus.OK

    @property
    def records(self) -> list[Any]:
        """Result as a list; a scalar or object result is wrapped, None gives []."""
        if not self.is_ok or self.result is None:
            return []
        if isinstance(self.result, list):
            return self.result
        return [self.result]

    @property
    def first(self) -> Any:
        records = self.records
        return records[0] if records else None


@dataclass
class QueryResponse:
    """All statement results of one ``query`` call."""

    results: list[QueryResult] = field(default_factory=list)

    @classmethod
    def from_rpc_result(cls, data: Any) -> "QueryResponse":
        if data is None:
            return cls()
        items = data if isinstance(data, list) else [data]
        return cls(results=[QueryResult.from_value(item) for item in items])

    @property
    def is_ok(self) -> bool:
        return all(r.is_ok for r in self.results)

    @property
    def first_result(self) -> QueryResult | None:
        return self.results[0] if self.results else None

    @property
    def errors(self) -> list[str]:
        """Error messages of the failed statements, in statement order."""
        return [str(r.result) for r in self.results if not r.is_ok]

    def raise_for_errors(self) -> "QueryResponse":
        """Raise ResponseError if any statement failed, otherwise return self."""
        if not self.is_ok:
            raise ResponseError("; ".join(self.errors))
        return self

    def __len__(self) -> int:
        return len(self.results)

    def __getitem__(self, index: int) -> QueryResult:
        return self.results[index]
