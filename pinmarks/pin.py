from __future__ import annotations

from typing import Any

PIN_KEY = "userPin"
PIN_LENGTH = 4


def is_well_formed(pin: str) -> bool:
    return len(pin) == PIN_LENGTH and pin.isdigit()


class PinGate:
    """PIN kept verbatim in the key-value store. A convenience lock, not a credential."""

    def __init__(self, kv: Any):
        self.kv = kv

    async def has_pin(self) -> bool:
        return bool(await self.kv.kv_get(PIN_KEY))

    async def matches(self, pin: str) -> bool:
        return (await self.kv.kv_get(PIN_KEY)) == pin

    async def set_pin(self, pin: str) -> None:
        await self.kv.kv_set(PIN_KEY, pin)

    async def reset(self) -> None:
        await self.kv.kv_remove(PIN_KEY)
