"""
ledger_vm.runtime.auth_api: the authorization oracle a call consults.

Signature checking is the host's business and happens before a call reaches
the runtime. What a contract sees is only a predicate: "did principal P
authorize this call?". `require_auth(P)` returns silently when it did and
raises `Unauthorized` otherwise, aborting the call.

Two oracles are provided:

- SignerSetAuth: the call carries the set of principals that signed it.
- AllowAllAuth: every principal is treated as authorized (local simulation,
  scripted setups). Checks are still recorded.

Both remember which principals were checked, in order, so tests and tooling
can assert on the authorization footprint of a call.
"""

from __future__ import annotations

from typing import FrozenSet, Iterable, List, Protocol, runtime_checkable

from ..errors import Unauthorized


@runtime_checkable
class AuthOracle(Protocol):
    def require_auth(self, principal: bytes) -> None: ...

    @property
    def checked(self) -> List[bytes]: ...


class SignerSetAuth:
    def __init__(self, signers: Iterable[bytes] = ()) -> None:
        self._signers: FrozenSet[bytes] = frozenset(bytes(s) for s in signers)
        self._checked: List[bytes] = []

    @property
    def signers(self) -> FrozenSet[bytes]:
        return self._signers

    @property
    def checked(self) -> List[bytes]:
        return list(self._checked)

    def require_auth(self, principal: bytes) -> None:
        p = bytes(principal)
        self._checked.append(p)
        if p not in self._signers:
            raise Unauthorized(context={"principal": p})


class AllowAllAuth:
    def __init__(self) -> None:
        self._checked: List[bytes] = []

    @property
    def checked(self) -> List[bytes]:
        return list(self._checked)

    def require_auth(self, principal: bytes) -> None:
        self._checked.append(bytes(principal))


__all__ = ["AuthOracle", "SignerSetAuth", "AllowAllAuth"]
