"""Tests for the mutation orchestrator and the text-to-batch pipeline.

A fake client records every dispatched request so ordering, shared version
stamps and partial-failure behavior can be asserted without any network.
"""

from __future__ import annotations

import json
from typing import Any

import pytest
import requests

from stockrecon.inventory.client import InventoryAPIError, InventoryClient, MutationResponse
from stockrecon.reconcile.batch import MutationOrchestrator, build_request, plan_text, reconcile_text
from stockrecon.reconcile.errors import EmptyBatchError, MissingVersionError
from stockrecon.reconcile.models import BatchContext, MutationRequest, OperationKind


class FakeInventoryClient:
    """Records calls and fails for the SKUs listed in `failures`."""

    def __init__(self, failures: dict[str, Exception] | None = None) -> None:
        self.failures = failures or {}
        self.calls: list[tuple[str, MutationRequest]] = []

    def mutate_by_sku(self, sku: str, request: MutationRequest) -> MutationResponse:
        self.calls.append((sku, request))
        if sku in self.failures:
            raise self.failures[sku]
        request.validate()
        return MutationResponse(message=f"{sku} 更新成功", after_qty=100 - request.change_amount, seq_no=len(self.calls))


class JSONReplySession(requests.Session):
    """Answers every request with the next queued JSON body (HTTP 200)."""

    def __init__(self, *bodies: Any) -> None:
        super().__init__()
        self.bodies = list(bodies)
        self.calls: list[str] = []

    def request(self, method, url, **kwargs):  # type: ignore[override]
        self.calls.append(url)
        resp = requests.Response()
        resp.status_code = 200
        resp._content = json.dumps(self.bodies.pop(0)).encode("utf-8")
        resp.url = url
        return resp


def _context(**overrides: object) -> BatchContext:
    values: dict[str, object] = {"global_version": "1.0.0", "created_by": 7, "updated_by": 8}
    values.update(overrides)
    return BatchContext(**values)  # type: ignore[arg-type]


def test_run_batch_dispatches_one_request_per_entry_in_order() -> None:
    client = FakeInventoryClient()
    entries = {"A72-L-BLACK": 5, "A72-M-WHITE": 1, "B10": 3}

    result = MutationOrchestrator(client).run_batch(entries, _context())

    assert [sku for sku, _ in client.calls] == ["A72-L-BLACK", "A72-M-WHITE", "B10"]
    assert [o.sku for o in result.success_list] == ["A72-L-BLACK", "A72-M-WHITE", "B10"]
    assert [o.change_amount for o in result.success_list] == [5, 1, 3]
    assert result.success_list[0].message == "A72-L-BLACK 更新成功"
    assert result.fail_list == []


def test_every_request_carries_the_same_version_stamp() -> None:
    client = FakeInventoryClient()

    MutationOrchestrator(client).run_batch({"A": 1, "B": 2, "C": 3}, _context(global_version="2.3.4"))

    requests = [request for _, request in client.calls]
    assert {r.global_version for r in requests} == {"2.3.4"}
    assert {r.version_seq_no for r in requests} == {1}
    assert {r.operation_kind for r in requests} == {OperationKind.SALE_OUT}
    assert {(r.created_by, r.updated_by) for r in requests} == {(7, 8)}
    assert all("2.3.4" in r.remark for r in requests)
    assert all(r.after_qty is None for r in requests)


def test_partial_failure_does_not_abort_the_batch() -> None:
    """The second SKU fails; the first and third still succeed, in order."""
    client = FakeInventoryClient(failures={"B": InventoryAPIError("版本冲突", status_code=409)})

    result = MutationOrchestrator(client).run_batch({"A": 1, "B": 2, "C": 3}, _context())

    assert [o.sku for o in result.success_list] == ["A", "C"]
    assert [o.sku for o in result.fail_list] == ["B"]
    failure = result.fail_list[0]
    assert failure.status == "failure"
    assert failure.error == "版本冲突"
    assert failure.change_amount == 2
    assert failure.message is None
    assert len(client.calls) == 3


def test_validation_errors_are_reported_per_item() -> None:
    """A request the client refuses to send is a per-item failure too."""
    client = FakeInventoryClient(failures={"A": ValueError("改变值不能为负数")})

    result = MutationOrchestrator(client).run_batch({"A": 1, "B": 2}, _context())

    assert [o.sku for o in result.fail_list] == ["A"]
    assert [o.sku for o in result.success_list] == ["B"]


def test_unexpected_client_errors_are_reported_per_item() -> None:
    """An error type outside the client's own still only fails that SKU."""
    client = FakeInventoryClient(failures={"B": RuntimeError("connection reset")})

    result = MutationOrchestrator(client).run_batch({"A": 1, "B": 2, "C": 3}, _context())

    assert [o.sku for o in result.success_list] == ["A", "C"]
    assert [(o.sku, o.error) for o in result.fail_list] == [("B", "connection reset")]
    assert len(client.calls) == 3


def test_malformed_service_reply_fails_only_that_item() -> None:
    """A 200 reply that is not a JSON object is a per-item failure."""
    session = JSONReplySession({"message": "ok"}, ["unexpected"], {"message": "ok"})
    client = InventoryClient(base_url="http://inventory.test/api", session=session)

    result = MutationOrchestrator(client).run_batch({"A": 1, "B": 2, "C": 3}, _context())

    assert [o.sku for o in result.success_list] == ["A", "C"]
    assert [o.sku for o in result.fail_list] == ["B"]
    assert "不正なレスポンス" in (result.fail_list[0].error or "")
    assert len(session.calls) == 3


def test_adjust_kind_without_after_qty_fails_each_item() -> None:
    """The orchestrator does not look up stock, so ADJUST cannot be satisfied."""
    client = FakeInventoryClient()

    result = MutationOrchestrator(client).run_batch(
        {"A": 1, "B": 2}, _context(operation_kind=OperationKind.ADJUST)
    )

    assert result.success_list == []
    assert [o.sku for o in result.fail_list] == ["A", "B"]
    assert all("库存调整" in (o.error or "") for o in result.fail_list)


def test_every_entry_lands_in_exactly_one_list() -> None:
    entries = {f"SKU-{i}": i + 1 for i in range(10)}
    failures = {f"SKU-{i}": InventoryAPIError("boom") for i in range(0, 10, 3)}

    result = MutationOrchestrator(FakeInventoryClient(failures)).run_batch(entries, _context())

    succeeded = {o.sku for o in result.success_list}
    failed = {o.sku for o in result.fail_list}
    assert succeeded | failed == set(entries)
    assert succeeded & failed == set()
    assert result.total == len(entries)


def test_empty_entries_raise_before_any_call() -> None:
    client = FakeInventoryClient()

    with pytest.raises(EmptyBatchError):
        MutationOrchestrator(client).run_batch({}, _context())
    assert client.calls == []


def test_build_request_ignores_row_kind_and_uses_context() -> None:
    request = build_request("A72-L-BLACK", 4, _context(source="扫描件"))

    assert request.operation_kind is OperationKind.SALE_OUT
    assert request.change_amount == 4
    assert request.remark == "扫描件导入，版本号：1.0.0"


def test_reconcile_text_end_to_end() -> None:
    """Two rows of one SKU become a single request with the summed amount."""
    text = "入库单 版本号：1.0.0\n| A72-L-BLACK | 2 | 出库 |\n| A72-L-BLACK | 3 | 出库 |\n"
    client = FakeInventoryClient()

    result = reconcile_text(text, client, created_by=1)

    assert len(client.calls) == 1
    sku, request = client.calls[0]
    assert sku == "A72-L-BLACK"
    assert request.change_amount == 5
    assert request.global_version == "1.0.0"
    assert request.updated_by == 1
    assert [o.sku for o in result.success_list] == ["A72-L-BLACK"]


def test_reconcile_text_without_version_dispatches_nothing() -> None:
    client = FakeInventoryClient()

    with pytest.raises(MissingVersionError):
        reconcile_text("| A72-L-BLACK | 2 | 出库 |\n", client, created_by=1)
    assert client.calls == []


def test_reconcile_text_without_valid_rows_dispatches_nothing() -> None:
    client = FakeInventoryClient()

    with pytest.raises(EmptyBatchError):
        reconcile_text("版本号：1.0.0\n| | 5 | SALE |\n| SKU-1 | -3 | SALE |\n", client, created_by=1)
    assert client.calls == []


def test_plan_text_builds_requests_without_dispatching() -> None:
    text = "版本号：3.0.0\n| A | 1 | 出库 |\n| B | 2 | 出库 |\n| A | 4 | 出库 |\n"

    extraction, entries, planned = plan_text(text, created_by=2, updated_by=5)

    assert extraction.global_version == "3.0.0"
    assert len(extraction.rows) == 3
    assert entries == {"A": 5, "B": 2}
    assert [(r.sku, r.change_amount) for r in planned] == [("A", 5), ("B", 2)]
    assert {r.updated_by for r in planned} == {5}


def test_plan_text_rejects_empty_batch() -> None:
    with pytest.raises(EmptyBatchError):
        plan_text("版本号：3.0.0\n", created_by=1)
