"""
Mock Response Synthesizer

Answers queries the host sends back to the harness, using the mock responses
recorded in the trace. Matching goes kind first, then the selector key for
preference-like kinds, then the kind's default. It always produces a response:
the host blocks until it gets one.
"""

import json
import logging
from typing import Any, Dict, Iterable, Optional

from ..commands import CommandDescriptor, QueryCategory, QueryKind, QUERY_KINDS
from ..context import RunContext
from ..traces.schema import MockResponseRecord

logger = logging.getLogger(__name__)


def find_matching_record(
    query: CommandDescriptor,
    pool: Iterable[MockResponseRecord],
    package_name: str = "",
) -> Optional[MockResponseRecord]:
    """First record in document order that answers `query`, or None."""
    spec = QUERY_KINDS.get(query.kind)
    same_kind = (r for r in pool if r.kind == query.kind)

    if spec is not None and spec.category is QueryCategory.SELECTOR:
        wanted = spec.selector_key(package_name, query.data)
        return next((r for r in same_kind if r.key == wanted), None)

    return next(same_kind, None)


def build_response(kind: str, data: Any) -> Dict[str, Any]:
    return {"type": kind, "data": data}


def default_response(query: CommandDescriptor) -> Dict[str, Any]:
    """A structurally valid response for a query no record answers."""
    spec = QUERY_KINDS.get(query.kind)
    if spec is None:
        logger.warning("No response type registered for query '%s', answering null", query.kind)
        return build_response(query.kind, None)
    return build_response(query.kind, spec.default())


def synthesize(
    query: CommandDescriptor,
    pool: Iterable[MockResponseRecord],
    package_name: str = "",
) -> Dict[str, Any]:
    """Answer a host query from the recorded pool, or with the kind's default."""
    record = find_matching_record(query, pool, package_name)
    if record is None:
        logger.debug("No recorded response for %s, using default", query.kind)
        return default_response(query)
    return build_response(record.kind, record.data)


def describe_request(query: CommandDescriptor, package_name: str) -> str:
    spec = QUERY_KINDS.get(query.kind)
    if _is_selector(spec):
        return f"{query.kind} with key '{spec.selector_key(package_name, query.data)}'"
    return query.describe()


def describe_response(query: CommandDescriptor, response: Dict[str, Any], package_name: str) -> str:
    spec = QUERY_KINDS.get(query.kind)
    data = response.get("data")
    if _is_selector(spec) and isinstance(data, dict):
        key = spec.selector_key(package_name, query.data)
        return f"data for key '{key}': {_compact(data.get('value'))}"
    return _compact(response)


def _is_selector(spec: Optional[QueryKind]) -> bool:
    return spec is not None and spec.category is QueryCategory.SELECTOR


def _compact(value: Any) -> str:
    return json.dumps(value, sort_keys=True, default=str)


class MockResponder:
    """
    Query handler bound to one trace's mock pool and run context.

    The host calls `answer_query` for every question it asks. Each call is
    self-contained and never waits on the command stream.
    """

    def __init__(self, pool: Iterable[MockResponseRecord], context: Optional[RunContext] = None):
        self.pool = list(pool)
        self.context = context

    def answer_query(self, package_name: str, query: CommandDescriptor) -> Dict[str, Any]:
        spec = QUERY_KINDS.get(query.kind)
        if spec is not None and not spec.request_shape(query.data):
            logger.warning("Query %s has unexpected payload: %r", query.kind, query.data)

        response = synthesize(query, self.pool, package_name)
        self._report(package_name, query, response)
        return response

    __call__ = answer_query

    def _report(self, package_name: str, query: CommandDescriptor, response: Dict[str, Any]) -> None:
        request_desc = describe_request(query, package_name)
        response_desc = describe_response(query, response, package_name)
        logger.info("Responded to request %s with %s", request_desc, response_desc)
        if self.context is None:
            return
        try:
            self.context.report_query(request_desc, response_desc)
        except (OSError, ValueError) as e:
            logger.warning("Could not report query %s: %s", query.kind, e)
