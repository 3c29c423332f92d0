"""Framework-neutral data aliases."""

from __future__ import annotations

from typing import Any

type Params = Any
type PathKey = str | int
type Address = tuple[PathKey, ...]
type Message = dict[str, str]
