"""Unique variable names for program entities.

Robot programs declare tools, work objects, targets and external axes as
named variables, so every name may be claimed by one owner only. Owners
whose name is taken are kept as pending; when a name is released the
registry notifies its listeners with the pending owners so they can try
again.
"""

import logging
from typing import Callable, Dict, Hashable, List, Optional

from .constants import RAPID_NAME_MAX_LENGTH

logger = logging.getLogger(__name__)

Listener = Callable[[List[Hashable]], None]


def validate_rapid_name(name: str) -> List[str]:
    """Problems that keep `name` from being used as a RAPID variable name."""
    problems = []
    if len(name) > RAPID_NAME_MAX_LENGTH:
        problems.append(f"Name '{name}' exceeds the limit of {RAPID_NAME_MAX_LENGTH} characters.")
    if name[:1].isdigit():
        problems.append(f"Name '{name}' starts with a number, which is not allowed in RAPID code.")
    return problems


class NameRegistry:
    """Registry of names keyed by owner.

    An owner holds at most one name. Owners that requested a name already in
    use are pending until they are renamed or removed.
    """

    def __init__(self):
        self._names: Dict[Hashable, str] = {}
        self._pending: Dict[Hashable, str] = {}
        self._listeners: List[Listener] = []

    def __contains__(self, name: str) -> bool:
        return name in self._names.values()

    def __len__(self) -> int:
        return len(self._names)

    def subscribe(self, listener: Listener) -> None:
        """Call `listener` with the pending owners whenever a name is released."""
        self._listeners.append(listener)

    def name_of(self, owner: Hashable) -> Optional[str]:
        return self._names.get(owner)

    def is_unique(self, owner: Hashable) -> bool:
        return owner in self._names

    def pending(self) -> List[Hashable]:
        return list(self._pending)

    def add(self, owner: Hashable, name: str) -> bool:
        """Claim `name` for `owner`, releasing the owner's previous name.

        Returns:
            True if the name was free, False if the owner is now pending
        """
        released = self._release(owner)
        self._pending.pop(owner, None)

        taken = name in self
        if taken:
            logger.debug("Name '%s' already in use, %r is pending", name, owner)
            self._pending[owner] = name
        else:
            self._names[owner] = name

        if released is not None and released != name:
            self._notify()
        return not taken

    def rename(self, owner: Hashable, name: str) -> bool:
        return self.add(owner, name)

    def remove(self, owner: Hashable) -> None:
        """Forget `owner` and release its name."""
        self._pending.pop(owner, None)
        if self._release(owner) is not None:
            self._notify()

    def recheck(self) -> List[Hashable]:
        """Give pending owners whose requested name is free again their name.

        Returns:
            The owners that got their name
        """
        resolved = []
        for owner, name in list(self._pending.items()):
            if name not in self:
                self._names[owner] = name
                del self._pending[owner]
                resolved.append(owner)
        return resolved

    def _release(self, owner: Hashable) -> Optional[str]:
        return self._names.pop(owner, None)

    def _notify(self) -> None:
        if not self._pending:
            return
        pending = self.pending()
        for listener in self._listeners:
            listener(pending)
