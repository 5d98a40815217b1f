from __future__ import annotations
import copy
from dataclasses import dataclass, field
from typing import Dict, List, Tuple
from .models import Fingerprint, Identity, Key, Token


@dataclass
class DirectoryState:
    """
    The five tables owned by a DirectoryServer.

    Nothing outside the server holds references into these dicts; callers
    that want to look at them get a snapshot().
    """
    keys: Dict[Fingerprint, Key] = field(default_factory=dict)
    uploaded: Dict[Token, Fingerprint] = field(default_factory=dict)
    pending: Dict[Token, Tuple[Fingerprint, Identity]] = field(default_factory=dict)
    confirmed: Dict[Identity, Fingerprint] = field(default_factory=dict)
    managed: Dict[Token, Fingerprint] = field(default_factory=dict)

    def confirmed_for(self, fingerprint: Fingerprint) -> List[Identity]:
        return [i for i, f in self.confirmed.items() if f == fingerprint]

    def snapshot(self) -> "DirectoryState":
        return copy.deepcopy(self)

    def counts(self) -> Dict[str, int]:
        return {
            "keys": len(self.keys),
            "uploaded": len(self.uploaded),
            "pending": len(self.pending),
            "confirmed": len(self.confirmed),
            "managed": len(self.managed),
        }
