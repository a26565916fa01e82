from __future__ import annotations

from uuid import UUID, uuid4

import pytest
from sqlalchemy.exc import OperationalError

from student_portal.modules.batches.service import BatchMergeResolver


class FakeMergeRepository:
    def __init__(self, groups: dict[UUID, list[UUID]] | None = None, *, fail: bool = False) -> None:
        self.groups = groups or {}
        self.fail = fail

    async def get_merge_group_id(self, batch_id: UUID) -> UUID | None:
        if self.fail:
            raise OperationalError("SELECT", {}, Exception("connection lost"))
        for group_id, members in self.groups.items():
            if batch_id in members:
                return group_id
        return None

    async def list_merge_group_batch_ids(self, merge_group_id: UUID) -> list[UUID]:
        return list(self.groups.get(merge_group_id, []))


@pytest.mark.asyncio
async def test_batch_outside_any_group_resolves_to_itself() -> None:
    batch_id = uuid4()
    resolver = BatchMergeResolver(FakeMergeRepository())  # type: ignore[arg-type]

    assert await resolver.resolve_group(batch_id) == {batch_id}


@pytest.mark.asyncio
async def test_merge_group_resolution_is_symmetric() -> None:
    batch_a, batch_b, batch_c = uuid4(), uuid4(), uuid4()
    resolver = BatchMergeResolver(
        FakeMergeRepository({uuid4(): [batch_a, batch_b, batch_c]}),  # type: ignore[arg-type]
    )

    group_a = await resolver.resolve_group(batch_a)
    group_c = await resolver.resolve_group(batch_c)

    assert group_a == {batch_a, batch_b, batch_c}
    assert group_a == group_c


@pytest.mark.asyncio
async def test_lookup_failure_degrades_to_single_batch() -> None:
    batch_id = uuid4()
    resolver = BatchMergeResolver(FakeMergeRepository(fail=True))  # type: ignore[arg-type]

    assert await resolver.resolve_group(batch_id) == {batch_id}
