"""Block storage backends used by the content order tooling."""

from __future__ import annotations

import json
import os
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from threading import RLock
from typing import Any, Iterable, Iterator, Mapping, Protocol, runtime_checkable

import structlog
from filelock import FileLock
from pydantic import ValidationError

from libraries.blocks.errors import (
    BlockConflictError,
    BlockNotFoundError,
    BlockStoreError,
)
from libraries.blocks.models import Block

logger = structlog.get_logger(__name__)


def _now_millis() -> int:
    return int(datetime.now(timezone.utc).timestamp() * 1000)


def _next_update_at(previous: int) -> int:
    # update_at doubles as the version used by conditional writes, so it must
    # move forward even when two writes land within the same millisecond.
    return max(_now_millis(), previous + 1)


@runtime_checkable
class BlockStore(Protocol):
    """Protocol implemented by block storage backends."""

    def get_block(self, block_id: str) -> Block | None:
        ...

    def get_blocks_with_parent(self, parent_id: str) -> list[Block]:
        ...

    def get_blocks_with_type(self, board_id: str, block_type: str) -> list[Block]:
        ...

    def patch_block_fields(
        self,
        block_id: str,
        updated_fields: Mapping[str, Any],
        *,
        modified_by: str,
        expected_update_at: int | None = None,
    ) -> Block:
        ...


def _apply_patch(
    current: Block,
    updated_fields: Mapping[str, Any],
    *,
    modified_by: str,
    expected_update_at: int | None,
) -> Block:
    if expected_update_at is not None and current.update_at != expected_update_at:
        raise BlockConflictError(
            current.id, expected=expected_update_at, actual=current.update_at
        )
    fields = dict(current.fields or {})
    fields.update(updated_fields)
    return current.model_copy(
        update={
            "fields": fields,
            "modified_by": modified_by,
            "update_at": _next_update_at(current.update_at),
        },
        deep=True,
    )


class InMemoryBlockStore:
    """Dictionary backed block store, mainly for tests and dry runs."""

    def __init__(self, blocks: Iterable[Block] = ()) -> None:
        self._lock = RLock()
        self._blocks: dict[str, Block] = {}
        self.insert_blocks(blocks)

    def insert_blocks(self, blocks: Iterable[Block]) -> list[Block]:
        """Insert or replace *blocks*, preserving first insertion order."""

        inserted: list[Block] = []
        with self._lock:
            for block in blocks:
                stored = block.model_copy(deep=True)
                self._blocks[stored.id] = stored
                inserted.append(stored.model_copy(deep=True))
        return inserted

    def get_block(self, block_id: str) -> Block | None:
        with self._lock:
            block = self._blocks.get(block_id)
            return block.model_copy(deep=True) if block is not None else None

    def get_blocks_with_parent(self, parent_id: str) -> list[Block]:
        with self._lock:
            return [
                block.model_copy(deep=True)
                for block in self._blocks.values()
                if block.parent_id == parent_id
            ]

    def get_blocks_with_type(self, board_id: str, block_type: str) -> list[Block]:
        with self._lock:
            return [
                block.model_copy(deep=True)
                for block in self._blocks.values()
                if block.board_id == board_id and block.type == block_type
            ]

    def patch_block_fields(
        self,
        block_id: str,
        updated_fields: Mapping[str, Any],
        *,
        modified_by: str,
        expected_update_at: int | None = None,
    ) -> Block:
        with self._lock:
            current = self._blocks.get(block_id)
            if current is None:
                raise BlockNotFoundError(block_id)
            patched = _apply_patch(
                current,
                updated_fields,
                modified_by=modified_by,
                expected_update_at=expected_update_at,
            )
            self._blocks[block_id] = patched
            return patched.model_copy(deep=True)


class JsonBlockStore:
    """Block store persisted as a JSON array of block objects.

    Every read goes back to disk so that separate processes observe each
    other's writes.  Inserts and patches hold an exclusive lock on a sibling
    ``.lock`` file from the read through the write, so conditional updates
    from separate processes are serialised and compare against the latest
    ``update_at``.  Writes replace the file atomically.
    """

    def __init__(self, path: os.PathLike[str] | str) -> None:
        self._path = Path(path)
        self._lock = RLock()
        lock_path = self._path.with_suffix(self._path.suffix + ".lock")
        self._file_lock = FileLock(str(lock_path))

    @property
    def path(self) -> Path:
        """Return the path backing the store."""

        return self._path

    @contextmanager
    def _exclusive(self) -> Iterator[None]:
        with self._lock:
            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                self._file_lock.acquire()
            except OSError as exc:
                raise BlockStoreError(
                    f"Unable to lock block store '{self._path}': {exc}"
                ) from exc
            try:
                yield
            finally:
                self._file_lock.release()

    def _read(self) -> list[Block]:
        if not self._path.exists():
            return []
        try:
            raw_data = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise BlockStoreError(
                f"Unable to read block store '{self._path}': {exc}"
            ) from exc
        try:
            payload = json.loads(raw_data or "[]")
        except json.JSONDecodeError as exc:
            raise BlockStoreError(
                f"Block store '{self._path}' is not valid JSON: {exc}"
            ) from exc
        if not isinstance(payload, list):
            raise BlockStoreError(
                f"Block store '{self._path}' must contain a JSON array of blocks"
            )

        blocks: list[Block] = []
        for index, item in enumerate(payload):
            if not isinstance(item, dict):
                raise BlockStoreError(
                    f"Entry {index} in '{self._path}' is not a block object"
                )
            try:
                blocks.append(Block.from_storage(item))
            except ValidationError as exc:
                raise BlockStoreError(
                    f"Entry {index} in '{self._path}' is not a valid block: {exc}"
                ) from exc
        return blocks

    def _write(self, blocks: Iterable[Block]) -> None:
        payload = [block.to_storage() for block in blocks]
        serialised = json.dumps(payload, indent=2, sort_keys=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(serialised, encoding="utf-8")
            os.replace(tmp_path, self._path)
        except OSError as exc:
            logger.warning(
                "blocks.store.write_failed", path=str(self._path), error=str(exc)
            )
            raise BlockStoreError(
                f"Unable to write block store '{self._path}': {exc}"
            ) from exc
        finally:
            try:
                tmp_path.unlink()
            except FileNotFoundError:
                pass

    def load(self) -> list[Block]:
        """Return every stored block in file order."""

        with self._lock:
            return self._read()

    def insert_blocks(self, blocks: Iterable[Block]) -> list[Block]:
        """Insert or replace *blocks* and persist the result."""

        with self._exclusive():
            existing = {block.id: block for block in self._read()}
            inserted = list(blocks)
            for block in inserted:
                existing[block.id] = block
            self._write(existing.values())
            return inserted

    def get_block(self, block_id: str) -> Block | None:
        with self._lock:
            for block in self._read():
                if block.id == block_id:
                    return block
            return None

    def get_blocks_with_parent(self, parent_id: str) -> list[Block]:
        with self._lock:
            return [block for block in self._read() if block.parent_id == parent_id]

    def get_blocks_with_type(self, board_id: str, block_type: str) -> list[Block]:
        with self._lock:
            return [
                block
                for block in self._read()
                if block.board_id == board_id and block.type == block_type
            ]

    def patch_block_fields(
        self,
        block_id: str,
        updated_fields: Mapping[str, Any],
        *,
        modified_by: str,
        expected_update_at: int | None = None,
    ) -> Block:
        with self._exclusive():
            blocks = self._read()
            for index, current in enumerate(blocks):
                if current.id != block_id:
                    continue
                patched = _apply_patch(
                    current,
                    updated_fields,
                    modified_by=modified_by,
                    expected_update_at=expected_update_at,
                )
                blocks[index] = patched
                self._write(blocks)
                logger.debug(
                    "blocks.store.patched",
                    path=str(self._path),
                    block_id=block_id,
                    update_at=patched.update_at,
                )
                return patched
            raise BlockNotFoundError(block_id)


__all__ = ["BlockStore", "InMemoryBlockStore", "JsonBlockStore"]
